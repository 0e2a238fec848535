"""Optimistic-lock helper shared by records that carry a ``version`` counter."""

from typing import Optional

from fastapi import HTTPException, status


def check_expected_version(
    current: int, expected: Optional[int], resource: str = "Record"
) -> None:
    """Raise 409 when the caller's version is stale. ``None`` means last-write-wins."""
    if expected is not None and expected != current:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"{resource} was modified (expected version {expected}, found {current})",
        )
