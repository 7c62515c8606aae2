"""
Reconcile selected tags against the target inventory.
"""

from typing import List, Sequence


def missing_tags(selected: Sequence[str], target_tags: Sequence[str]) -> List[str]:
    """Selected tags absent from the target, in selection order."""
    present = set(target_tags)
    return [t for t in selected if t not in present]


def sync_set(missing: Sequence[str], forced: Sequence[str]) -> List[str]:
    """
    Tags to copy: the missing ones followed by the forced ones.

    Not deduplicated. A tag both missing and forced is copied twice, which
    is harmless since copying an existing tag is a no-op for the registry.
    """
    return list(missing) + list(forced)
