from __future__ import annotations

from enum import Enum


class AnomalyStatus(str, Enum):
    OPEN = "OPEN"
    ACKNOWLEDGED = "ACKNOWLEDGED"
    RESOLVED = "RESOLVED"
    FALSE_POSITIVE = "FALSE_POSITIVE"


class AnomalyAction(str, Enum):
    ACKNOWLEDGE = "acknowledge"
    RESOLVE = "resolve"
    MARK_FALSE_POSITIVE = "false-positive"


# Lifecycle is enforced by the API; this table only decides which actions a view offers.
TRANSITIONS: dict[AnomalyStatus, dict[AnomalyAction, AnomalyStatus]] = {
    AnomalyStatus.OPEN: {
        AnomalyAction.ACKNOWLEDGE: AnomalyStatus.ACKNOWLEDGED,
        AnomalyAction.MARK_FALSE_POSITIVE: AnomalyStatus.FALSE_POSITIVE,
    },
    AnomalyStatus.ACKNOWLEDGED: {
        AnomalyAction.RESOLVE: AnomalyStatus.RESOLVED,
        AnomalyAction.MARK_FALSE_POSITIVE: AnomalyStatus.FALSE_POSITIVE,
    },
    AnomalyStatus.RESOLVED: {},
    AnomalyStatus.FALSE_POSITIVE: {},
}

TERMINAL_STATUSES = frozenset({AnomalyStatus.RESOLVED, AnomalyStatus.FALSE_POSITIVE})


def parse_status(value: str) -> AnomalyStatus | None:
    # Unknown server statuses map to None so callers offer no actions.
    try:
        return AnomalyStatus(value.upper())
    except ValueError:
        return None


def allowed_actions(status: str | AnomalyStatus) -> tuple[AnomalyAction, ...]:
    resolved = status if isinstance(status, AnomalyStatus) else parse_status(status)
    if resolved is None:
        return ()
    return tuple(TRANSITIONS[resolved])


def next_status(status: str | AnomalyStatus, action: AnomalyAction) -> AnomalyStatus | None:
    # Return the target status, or None when the transition is illegal.
    resolved = status if isinstance(status, AnomalyStatus) else parse_status(status)
    if resolved is None:
        return None
    return TRANSITIONS[resolved].get(action)


def is_terminal(status: str | AnomalyStatus) -> bool:
    resolved = status if isinstance(status, AnomalyStatus) else parse_status(status)
    return resolved in TERMINAL_STATUSES
