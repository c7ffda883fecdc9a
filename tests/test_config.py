"""Test the configuration module functionality."""

import json

import pytest

from pseudoflow.algorithms.base import BucketOrder, RootSelection
from pseudoflow.config import DEFAULT_CONFIG, SolverConfig, load_config


def test_solver_config_defaults():
    """Default configuration is lowest-label with FIFO buckets."""
    config = SolverConfig()

    assert config.root_selection == RootSelection.LOWEST_LABEL
    assert config.bucket_order == BucketOrder.FIFO
    assert config.lowest_label
    assert config.fifo_bucket


def test_global_config_instance():
    assert DEFAULT_CONFIG == SolverConfig()


def test_flags_follow_enums():
    config = SolverConfig(
        root_selection=RootSelection.HIGHEST_LABEL, bucket_order=BucketOrder.LIFO
    )
    assert not config.lowest_label
    assert not config.fifo_bucket


def test_config_is_frozen():
    with pytest.raises(AttributeError):
        DEFAULT_CONFIG.bucket_order = BucketOrder.LIFO  # type: ignore[misc]


def test_to_dict_and_json():
    config = SolverConfig(bucket_order=BucketOrder.LIFO)
    expected = {
        "root_selection": "LOWEST_LABEL",
        "bucket_order": "LIFO",
        "lowest_label": True,
        "fifo_bucket": False,
    }
    assert config.to_dict() == expected
    assert json.loads(config.to_json()) == expected


class TestFromDict:
    def test_enum_names_case_insensitive(self):
        config = SolverConfig.from_dict(
            {"root_selection": "highest-label", "bucket_order": "lifo"}
        )
        assert config.root_selection == RootSelection.HIGHEST_LABEL
        assert config.bucket_order == BucketOrder.LIFO

    def test_enum_members(self):
        config = SolverConfig.from_dict({"root_selection": RootSelection.HIGHEST_LABEL})
        assert config.root_selection == RootSelection.HIGHEST_LABEL
        assert config.bucket_order == BucketOrder.FIFO

    def test_boolean_shorthands(self):
        config = SolverConfig.from_dict({"lowest_label": False, "fifo_bucket": False})
        assert config.root_selection == RootSelection.HIGHEST_LABEL
        assert config.bucket_order == BucketOrder.LIFO

    def test_round_trip(self):
        config = SolverConfig(root_selection=RootSelection.HIGHEST_LABEL)
        assert SolverConfig.from_dict(config.to_dict()) == config

    def test_empty_mapping_gives_defaults(self):
        assert SolverConfig.from_dict({}) == SolverConfig()

    @pytest.mark.parametrize(
        "data, message",
        [
            ({"bucket": "fifo"}, "Unknown solver config keys"),
            ({"root_selection": "middle"}, "Invalid value"),
            ({"bucket_order": 1}, "Invalid value"),
            ({"lowest_label": "yes"}, "must be a boolean"),
            (
                {"root_selection": "lowest_label", "lowest_label": False},
                "conflicts",
            ),
            ({"bucket_order": "fifo", "fifo_bucket": False}, "conflicts"),
        ],
    )
    def test_invalid(self, data, message):
        with pytest.raises(ValueError, match=message):
            SolverConfig.from_dict(data)


class TestLoadConfig:
    def test_yaml_file(self, tmp_path):
        path = tmp_path / "solver.yaml"
        path.write_text("root_selection: highest_label\nbucket_order: lifo\n")
        config = load_config(path)
        assert config.root_selection == RootSelection.HIGHEST_LABEL
        assert config.bucket_order == BucketOrder.LIFO

    def test_solver_section(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("solver:\n  fifo_bucket: false\n")
        assert load_config(path) == SolverConfig(bucket_order=BucketOrder.LIFO)

    def test_json_is_accepted(self, tmp_path):
        path = tmp_path / "solver.json"
        path.write_text(SolverConfig(bucket_order=BucketOrder.LIFO).to_json())
        assert load_config(str(path)).bucket_order == BucketOrder.LIFO

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == SolverConfig()

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- lifo\n")
        with pytest.raises(ValueError, match="must be a mapping"):
            load_config(path)

    def test_invalid_yaml_rejected(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("root_selection: [unclosed\n")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            load_config(tmp_path / "missing.yaml")
