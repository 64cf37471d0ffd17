"""Page count estimation from the file name and size."""
from __future__ import annotations

from typing import Optional

from docgraph.profiles import DocumentProfile, resolve_profile

DEFAULT_PAGE_COUNT = 5

KIB = 1024
MIB = 1024 * 1024

# (upper bound in bytes, page count); sizes at or above the last bound get MAX_PAGE_COUNT
SIZE_STEPS = (
    (512 * KIB, 3),
    (1 * MIB, 5),
    (2 * MIB, 10),
    (5 * MIB, 20),
    (10 * MIB, 30),
)
MAX_PAGE_COUNT = 40


def estimate_pages(file_name: Optional[str], file_size: Optional[int],
                   profile: Optional[DocumentProfile] = None) -> int:
    """
    Guesses how many pages a document has.

    A profile with a pinned page count wins; otherwise the byte size is mapped
    through SIZE_STEPS. Always returns a positive integer.

    Args:
        file_name (Optional[str]): Uploaded file name.
        file_size (Optional[int]): Size in bytes, if known.
        profile (Optional[DocumentProfile]): Already resolved profile. Resolved from
            the file name when omitted.

    Returns:
        int: Estimated page count.
    """
    profile = profile or resolve_profile(file_name)
    if profile.pinned_pages:
        return profile.pinned_pages

    if not file_size or file_size <= 0:
        return DEFAULT_PAGE_COUNT

    for bound, pages in SIZE_STEPS:
        if file_size < bound:
            return pages
    return MAX_PAGE_COUNT
