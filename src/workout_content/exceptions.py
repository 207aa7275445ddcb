"""
Error taxonomy for the workout content service.

An enrichment miss is not represented here: the wger client returns ``None``
and the normalizer synthesizes a description instead.
"""

from __future__ import annotations


class WorkoutContentError(Exception):
    """Base class for service errors."""


class UpstreamError(WorkoutContentError):
    """The exercise catalog or a media host returned non-success or was unreachable."""

    def __init__(self, message: str, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def __str__(self) -> str:
        base = super().__str__()
        if self.status_code is not None:
            return f"{base} (status {self.status_code})"
        return base


class ValidationError(WorkoutContentError):
    """Malformed caller input, rejected before any network call."""


class NotFoundError(WorkoutContentError):
    """Media resolution exhausted every tier."""

    def __init__(self, message: str, tried: list[str], exercise_id: str | None = None) -> None:
        super().__init__(message)
        self.tried = list(tried)
        self.exercise_id = exercise_id
