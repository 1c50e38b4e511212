from __future__ import annotations

from opsdeck.domain.state import AnomalyAction, AnomalyStatus, allowed_actions, is_terminal, next_status


def test_actions_offered_per_status() -> None:
    assert allowed_actions("OPEN") == (AnomalyAction.ACKNOWLEDGE, AnomalyAction.MARK_FALSE_POSITIVE)
    assert allowed_actions("acknowledged") == (AnomalyAction.RESOLVE, AnomalyAction.MARK_FALSE_POSITIVE)
    assert allowed_actions(AnomalyStatus.RESOLVED) == ()
    assert allowed_actions("FALSE_POSITIVE") == ()
    assert allowed_actions("SNOOZED") == ()


def test_transitions() -> None:
    assert next_status("OPEN", AnomalyAction.ACKNOWLEDGE) is AnomalyStatus.ACKNOWLEDGED
    assert next_status("ACKNOWLEDGED", AnomalyAction.RESOLVE) is AnomalyStatus.RESOLVED
    assert next_status("OPEN", AnomalyAction.RESOLVE) is None
    assert next_status("RESOLVED", AnomalyAction.MARK_FALSE_POSITIVE) is None
    assert next_status("SNOOZED", AnomalyAction.ACKNOWLEDGE) is None


def test_terminal_statuses() -> None:
    assert is_terminal("RESOLVED")
    assert is_terminal(AnomalyStatus.FALSE_POSITIVE)
    assert not is_terminal("OPEN")
    assert not is_terminal("SNOOZED")
