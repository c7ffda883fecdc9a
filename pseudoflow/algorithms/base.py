from __future__ import annotations

from enum import IntEnum

#: Label assigned to the sink and to every node before it gains excess.
SINK_LABEL = 0

#: Label given to freshly created strong roots by the initializer.
INITIAL_STRONG_LABEL = 1

#: Arc direction flag: the tree edge pushes along forward residual (capacity - flow).
FORWARD = 1

#: Arc direction flag: the tree edge pushes by cancelling existing flow.
REVERSE = 0


class RootSelection(IntEnum):
    """
    Order in which strong roots are taken from the label buckets.
    """

    #: Process the strong root with the lowest label first; stops at the first gap.
    LOWEST_LABEL = 1
    #: Process the strong root with the highest label first; lifts gapped trees.
    HIGHEST_LABEL = 2


class BucketOrder(IntEnum):
    """Insertion order among strong roots that share a label."""

    FIFO = 1  # New roots are appended at the tail of the bucket
    LIFO = 2  # New roots are pushed at the head of the bucket
