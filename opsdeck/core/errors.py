from __future__ import annotations

from typing import Any


class OpsDeckError(Exception):
    """Base error for opsdeck."""


class ApiError(OpsDeckError):
    """The monitoring API answered with an HTTP error status."""

    def __init__(self, status_code: int, message: str, payload: Any | None = None) -> None:
        super().__init__(f"HTTP {status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.payload = payload


class ApiTransportError(OpsDeckError):
    """Network failure or timeout talking to the monitoring API."""


class ApiResponseError(OpsDeckError):
    """Successful status with a body that is not a valid data envelope."""


class SeedError(OpsDeckError):
    """Fixture seeding failure."""


class SeedReferenceError(SeedError):
    """A fixture references an entity that has not been seeded."""

    def __init__(self, kind: str, key: str, context: str | None = None) -> None:
        detail = f"{kind} {key!r} not found during seeding"
        if context:
            detail = f"{detail} ({context})"
        super().__init__(detail)
        self.kind = kind
        self.key = key


class SeedPlanError(SeedError):
    """The seed plan has a cycle or an unknown dependency."""
