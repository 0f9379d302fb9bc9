"""Candidate filtering and ordering for source auto-detection."""

from functools import cmp_to_key
from typing import Iterable, List

from core.models.candidate import Rank, SourceDescriptor

SOURCE_VIDEO_CLASSES = ("Source", "Video")

# Factory name of the auto-detecting source
AUTO_SOURCE_NAME = "autovideosrc"


def filter_candidates(
    descriptors: Iterable[SourceDescriptor],
    classes: Iterable[str] = SOURCE_VIDEO_CLASSES,
    min_rank: int = Rank.MARGINAL
) -> List[SourceDescriptor]:
    """Select the descriptors usable for autoplugging.

    Args:
        descriptors: Registry snapshot
        classes: Tags every candidate's class must carry
        min_rank: Lowest acceptable rank

    Returns:
        Matching descriptors in input order (possibly empty)
    """
    wanted = frozenset(classes)
    return [
        d for d in descriptors
        if wanted <= d.class_tags and d.rank >= min_rank
    ]


def compare_ranks(a: SourceDescriptor, b: SourceDescriptor) -> int:
    """Order by rank descending, then by name descending.

    Names are compared as UTF-8 bytes so the order does not depend on
    locale. Returns a negative number when a sorts before b.
    """
    diff = b.rank - a.rank
    if diff != 0:
        return diff
    name_a = a.name.encode("utf-8")
    name_b = b.name.encode("utf-8")
    return (name_b > name_a) - (name_b < name_a)


def sort_candidates(descriptors: Iterable[SourceDescriptor]) -> List[SourceDescriptor]:
    """Return the descriptors in probing order."""
    return sorted(descriptors, key=cmp_to_key(compare_ranks))
