"""Caps filter matching."""

from typing import Optional

from core.models.caps import Caps


def caps_compatible(filter_caps: Optional[Caps], advertised: Caps) -> bool:
    """Check a candidate's advertised caps against the caller's filter.

    Args:
        filter_caps: Acceptable formats (None = accept anything)
        advertised: Caps the candidate reports

    Returns:
        True if no filter is set or the two share at least one format
    """
    if filter_caps is None:
        return True
    return filter_caps.can_intersect(advertised)
