from __future__ import annotations

import pytest

from opsdeck.apps.console.main import _build_parser, run
from opsdeck.core.config import Settings


async def _run(argv: list[str], transport) -> int:
    return await run(_build_parser().parse_args(argv), Settings(), transport=transport)


@pytest.mark.asyncio
@pytest.mark.parametrize("command", [["dashboard"], ["usage", "--days", "7"], ["costs"], ["infra"], ["alerts"], ["anomalies"]])
async def test_read_commands_render(command, fake_transport, capsys) -> None:
    assert await _run(command, fake_transport) == 0
    assert "Error:" not in capsys.readouterr().out


@pytest.mark.asyncio
async def test_anomaly_actions_report_exit_codes(fake_state, fake_transport, capsys) -> None:
    assert await _run(["resolve", "a1", "--resolution", "restarted worker"], fake_transport) == 1
    assert "Cannot resolve an anomaly in status OPEN" in capsys.readouterr().out

    assert await _run(["ack", "a1"], fake_transport) == 0
    assert await _run(["resolve", "a1", "--resolution", "restarted worker"], fake_transport) == 0
    assert fake_state.anomalies["a1"]["status"] == "RESOLVED"
    assert fake_state.anomalies["a1"]["resolution"] == "restarted worker"

    assert await _run(["false-positive", "a2"], fake_transport) == 0
    assert await _run(["detect"], fake_transport) == 0
    assert "a4" in fake_state.anomalies


@pytest.mark.asyncio
async def test_alert_commands(fake_transport, capsys) -> None:
    assert await _run(["test-alert", "r1"], fake_transport) == 0
    assert await _run(["test-alert", "missing"], fake_transport) == 1
    assert await _run(["digest"], fake_transport) == 0
    output = capsys.readouterr().out
    assert "Alert rule not found" in output
    assert "Daily digest sent" in output


@pytest.mark.asyncio
async def test_ask_command(fake_state, fake_transport, capsys) -> None:
    assert await _run(["ask", "what", "is", "the", "status?"], fake_transport) == 0
    assert fake_state.chat_requests[0]["message"] == "what is the status?"
    assert "All systems nominal" in capsys.readouterr().out

    assert await _run(["ask", "please", "fail"], fake_transport) == 1
