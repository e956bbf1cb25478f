"""
Error taxonomy for the review core.

Every error is recoverable at the call boundary. ``ServiceUnavailable`` is
raised by score providers only; the scoring integration absorbs it into a
degraded result and never lets it reach its own callers.
"""
from __future__ import annotations

from typing import Iterable


class LendingError(Exception):
    """Base class for all review-core errors."""


class ValidationError(LendingError):
    """Malformed input, reported before any store call."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class IllegalTransition(LendingError):
    """Requested status is not reachable from the current one."""

    def __init__(self, current: str, target: str, allowed: Iterable[str] = (), message: str | None = None):
        self.current = current
        self.target = target
        self.allowed = sorted(allowed)
        super().__init__(
            message
            or f"Cannot move from {current} to {target}; allowed: {', '.join(self.allowed) or 'none (terminal)'}"
        )


class NotFound(LendingError):
    def __init__(self, kind: str, identifier: str):
        super().__init__(f"{kind} {identifier} not found")
        self.kind = kind
        self.identifier = identifier


class ServiceUnavailable(LendingError):
    """Scoring service outage or transport failure."""


class StoreFailure(LendingError):
    """Generic downstream failure of a store (database, network)."""
