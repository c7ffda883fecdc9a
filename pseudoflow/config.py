"""Configuration classes for the pseudoflow solver."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from pseudoflow.algorithms.base import BucketOrder, RootSelection


@dataclass(frozen=True)
class SolverConfig:
    """Runtime switches of the pseudoflow solver.

    Neither switch changes the computed flow value; they only change which
    strong root is processed next and, through that, the path the algorithm
    takes to the optimum.
    """

    # Lowest-label or highest-label processing of strong roots
    root_selection: RootSelection = RootSelection.LOWEST_LABEL

    # Ordering among strong roots that carry the same label
    bucket_order: BucketOrder = BucketOrder.FIFO

    @property
    def lowest_label(self) -> bool:
        return self.root_selection == RootSelection.LOWEST_LABEL

    @property
    def fifo_bucket(self) -> bool:
        return self.bucket_order == BucketOrder.FIFO

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "root_selection": self.root_selection.name,
            "bucket_order": self.bucket_order.name,
            "lowest_label": self.lowest_label,
            "fifo_bucket": self.fifo_bucket,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SolverConfig:
        """Build a config from a mapping.

        Accepts either the enum fields (``root_selection``, ``bucket_order``,
        given as enum members or case-insensitive names) or the boolean
        shorthands ``lowest_label`` and ``fifo_bucket``. When both forms are
        present for the same switch they must agree.

        Raises:
            ValueError: On unknown keys, unknown enum names, or conflicting values.
        """
        known = {"root_selection", "bucket_order", "lowest_label", "fifo_bucket"}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown solver config keys: {sorted(unknown)}")

        root_selection = RootSelection.LOWEST_LABEL
        if "root_selection" in data:
            root_selection = _parse_enum(
                RootSelection, data["root_selection"], "root_selection"
            )
        if "lowest_label" in data:
            from_flag = (
                RootSelection.LOWEST_LABEL
                if _parse_bool(data["lowest_label"], "lowest_label")
                else RootSelection.HIGHEST_LABEL
            )
            if "root_selection" in data and from_flag != root_selection:
                raise ValueError("'lowest_label' conflicts with 'root_selection'")
            root_selection = from_flag

        bucket_order = BucketOrder.FIFO
        if "bucket_order" in data:
            bucket_order = _parse_enum(BucketOrder, data["bucket_order"], "bucket_order")
        if "fifo_bucket" in data:
            from_flag = (
                BucketOrder.FIFO
                if _parse_bool(data["fifo_bucket"], "fifo_bucket")
                else BucketOrder.LIFO
            )
            if "bucket_order" in data and from_flag != bucket_order:
                raise ValueError("'fifo_bucket' conflicts with 'bucket_order'")
            bucket_order = from_flag

        return cls(root_selection=root_selection, bucket_order=bucket_order)


def load_config(path: Union[str, Path]) -> SolverConfig:
    """Load a SolverConfig from a YAML (or JSON) file.

    An empty file yields the default configuration. A top-level ``solver``
    section is honored when present, so the switches can live next to other
    settings in a shared file.

    Raises:
        ValueError: If the document is not a mapping or holds invalid values.
        OSError: If the file cannot be read.
    """
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in '{path}': {e}") from e
    if data is None:
        return SolverConfig()
    if not isinstance(data, dict):
        raise ValueError(f"Solver config in '{path}' must be a mapping")
    if "solver" in data:
        data = data["solver"] or {}
        if not isinstance(data, dict):
            raise ValueError(f"'solver' section in '{path}' must be a mapping")
    return SolverConfig.from_dict(data)


def _parse_enum(enum_cls: Any, value: Any, key: str) -> Any:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls[value.strip().upper().replace("-", "_")]
        except KeyError:
            pass
    choices = ", ".join(member.name for member in enum_cls)
    raise ValueError(f"Invalid value {value!r} for '{key}' (expected one of: {choices})")


def _parse_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    raise ValueError(f"'{key}' must be a boolean, got {value!r}")


# Global default configuration instance
DEFAULT_CONFIG = SolverConfig()
