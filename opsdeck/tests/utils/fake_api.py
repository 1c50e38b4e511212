from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _error(status_code: int, code: str, message: str) -> JSONResponse:
    # Same error envelope shape the real API answers with.
    return JSONResponse(status_code=status_code, content={"error": {"code": code, "message": message}})


def make_anomaly(anomaly_id: str, *, status: str = "OPEN", severity: str = "HIGH", category: str = "COST") -> dict[str, Any]:
    return {
        "id": anomaly_id,
        "type": "COST_SPIKE",
        "category": category,
        "severity": severity,
        "status": status,
        "metric": "daily_cost",
        "currentValue": 42.0,
        "expectedValue": 12.0,
        "deviation": 3.4,
        "message": f"Daily AI cost spiked ({anomaly_id})",
        "tenantId": None,
        "toolId": "ai-assistant",
        "detectedAt": "2026-10-18T09:00:00+00:00",
        "acknowledgedAt": None,
        "resolvedAt": None,
        "resolution": None,
    }


def make_rule(rule_id: str, name: str, *, enabled: bool = True) -> dict[str, Any]:
    return {
        "id": rule_id,
        "name": name,
        "description": None,
        "enabled": enabled,
        "severity": ["CRITICAL"],
        "category": ["COST"],
        "channel": "EMAIL",
        "recipients": ["ops@example.com"],
        "throttleMinutes": 60,
        "createdAt": "2026-10-01T00:00:00+00:00",
        "updatedAt": "2026-10-01T00:00:00+00:00",
    }


@dataclass
class FakeMonitoringState:
    """In-memory backend for the fake monitoring API.

    Anomaly transitions are enforced here the way the real service does,
    so illegal actions answer 409 with an error envelope.
    """

    anomalies: dict[str, dict[str, Any]] = field(default_factory=dict)
    rules: dict[str, dict[str, Any]] = field(default_factory=dict)
    history: list[dict[str, Any]] = field(default_factory=list)
    month_to_date_cost: float = 120.0
    daily_costs: list[float] = field(default_factory=lambda: [4.0] * 30)
    system: dict[str, Any] = field(
        default_factory=lambda: {
            "memoryUsedMB": 512.0,
            "memoryTotalMB": 2048.0,
            "memoryUsagePercent": 40.0,
            "heapUsedMB": 128.0,
            "heapTotalMB": 256.0,
            "cpuUsagePercent": 20.0,
            "eventLoopLagMs": 4.0,
            "uptimeSeconds": 93784.0,
        }
    )
    error_rates: list[dict[str, Any]] = field(
        default_factory=lambda: [
            {"endpoint": "GET /api/projects", "errorCount": 0, "totalCount": 400, "errorRate": 0.0},
            {"endpoint": "POST /api/ai/chat", "errorCount": 6, "totalCount": 50, "errorRate": 12.0},
        ]
    )
    failing_chat_marker: str = "fail"
    chat_requests: list[dict[str, Any]] = field(default_factory=list)
    calls: Counter[str] = field(default_factory=Counter)

    @classmethod
    def with_defaults(cls) -> "FakeMonitoringState":
        state = cls()
        for anomaly in (
            make_anomaly("a1"),
            make_anomaly("a2", severity="CRITICAL"),
            make_anomaly("a3", status="RESOLVED", category="PERFORMANCE", severity="LOW"),
        ):
            state.anomalies[anomaly["id"]] = anomaly
        state.rules["r1"] = make_rule("r1", "Critical cost alerts")
        return state

    def stats(self) -> dict[str, Any]:
        counts = Counter(anomaly["status"] for anomaly in self.anomalies.values())
        return {
            "total": len(self.anomalies),
            "open": counts["OPEN"],
            "acknowledged": counts["ACKNOWLEDGED"],
            "resolved": counts["RESOLVED"],
            "falsePositive": counts["FALSE_POSITIVE"],
            "bySeverity": dict(Counter(anomaly["severity"] for anomaly in self.anomalies.values())),
            "byCategory": dict(Counter(anomaly["category"] for anomaly in self.anomalies.values())),
        }


_ALLOWED_FROM = {
    "acknowledge": ({"OPEN"}, "ACKNOWLEDGED"),
    "resolve": ({"ACKNOWLEDGED"}, "RESOLVED"),
    "false-positive": ({"OPEN", "ACKNOWLEDGED"}, "FALSE_POSITIVE"),
}


def create_fake_api(state: FakeMonitoringState) -> FastAPI:
    router = APIRouter(prefix="/api")

    @router.get("/ai-monitoring/usage/summary")
    async def usage_summary(period: str = "day") -> dict[str, Any]:
        state.calls["usage_summary"] += 1
        return {
            "data": {
                "totalCalls": 1200,
                "totalTokens": 480000,
                "totalCost": 18.5,
                "avgLatencyMs": 820.0,
                "successRate": 98.5,
                "topTools": [{"toolId": "ai-assistant", "calls": 700, "cost": 11.0}],
                "topModels": [{"model": "gpt-4o-mini", "calls": 900, "cost": 9.5}],
            }
        }

    @router.get("/ai-monitoring/usage/realtime")
    async def usage_realtime() -> dict[str, Any]:
        state.calls["usage_realtime"] += 1
        window = {"calls": 10, "tokens": 4000, "cost": 0.2}
        return {"data": {"last5Minutes": window, "last1Hour": window, "today": window, "activeTools": ["ai-assistant"]}}

    @router.get("/ai-monitoring/usage/trends")
    async def usage_trends(days: int = 30) -> dict[str, Any]:
        state.calls["usage_trends"] += 1
        points = state.daily_costs[-days:]
        return {
            "data": [
                {"date": f"2026-10-{index + 1:02d}", "calls": 40, "tokens": 16000, "cost": cost}
                for index, cost in enumerate(points)
            ]
        }

    @router.get("/ai-monitoring/costs/breakdown")
    async def cost_breakdown(period: str = "month") -> dict[str, Any]:
        state.calls["cost_breakdown"] += 1
        total = state.month_to_date_cost
        return {
            "data": {
                "byTool": [{"toolId": "ai-assistant", "cost": total, "percentage": 100.0}],
                "byModel": [{"model": "gpt-4o-mini", "cost": total, "percentage": 100.0}],
                "byTenant": [],
                "total": total,
            }
        }

    @router.get("/monitoring/infrastructure")
    async def infrastructure() -> dict[str, Any]:
        state.calls["infrastructure"] += 1
        return {
            "data": {
                "latency": [
                    {"endpoint": "GET /api/projects", "avgMs": 40, "p50Ms": 30, "p95Ms": 120, "p99Ms": 300, "count": 400}
                ],
                "errors": state.error_rates,
                "system": state.system,
                "slowQueries": [],
            }
        }

    @router.get("/monitoring/infrastructure/system")
    async def system_health() -> dict[str, Any]:
        state.calls["system_health"] += 1
        return {"data": state.system}

    @router.get("/monitoring/infrastructure/slow-queries")
    async def slow_queries(limit: int = 50, minDuration: int = 100) -> dict[str, Any]:  # noqa: N803 - wire name
        state.calls["slow_queries"] += 1
        return {
            "data": [
                {"id": "q1", "query": "SELECT * FROM projects", "durationMs": 640.0, "timestamp": _utc_now()}
            ][:limit]
        }

    @router.get("/monitoring/anomalies")
    async def list_anomalies(
        category: str | None = None,
        severity: str | None = None,
        tenantId: str | None = None,  # noqa: N803 - wire name
    ) -> dict[str, Any]:
        state.calls["anomalies"] += 1
        rows = [
            anomaly
            for anomaly in state.anomalies.values()
            if (category is None or anomaly["category"] == category)
            and (severity is None or anomaly["severity"] == severity)
            and (tenantId is None or anomaly["tenantId"] == tenantId)
        ]
        return {"data": rows}

    @router.get("/monitoring/anomalies/stats")
    async def anomaly_stats() -> dict[str, Any]:
        state.calls["anomaly_stats"] += 1
        return {"data": state.stats()}

    @router.post("/monitoring/anomalies/detect")
    async def detect() -> dict[str, Any]:
        state.calls["detect"] += 1
        anomaly_id = f"a{len(state.anomalies) + 1}"
        state.anomalies[anomaly_id] = make_anomaly(anomaly_id, severity="MEDIUM")
        return {"message": "Detection complete: 1 new anomaly"}

    @router.get("/monitoring/anomalies/{anomaly_id}", response_model=None)
    async def get_anomaly(anomaly_id: str) -> dict[str, Any] | JSONResponse:
        state.calls["anomaly"] += 1
        anomaly = state.anomalies.get(anomaly_id)
        if anomaly is None:
            return _error(404, "NOT_FOUND", "Anomaly not found")
        return {"data": anomaly}

    async def _transition(anomaly_id: str, action: str, resolution: str | None = None) -> dict[str, Any] | JSONResponse:
        state.calls[action] += 1
        anomaly = state.anomalies.get(anomaly_id)
        if anomaly is None:
            return _error(404, "NOT_FOUND", "Anomaly not found")
        allowed, target = _ALLOWED_FROM[action]
        if anomaly["status"] not in allowed:
            return _error(409, "INVALID_TRANSITION", f"Cannot {action} an anomaly in status {anomaly['status']}")
        anomaly["status"] = target
        if action == "acknowledge":
            anomaly["acknowledgedAt"] = _utc_now()
        else:
            anomaly["resolvedAt"] = _utc_now()
            anomaly["resolution"] = resolution
        return {"message": f"Anomaly {target.lower().replace('_', ' ')}"}

    @router.post("/monitoring/anomalies/{anomaly_id}/acknowledge", response_model=None)
    async def acknowledge(anomaly_id: str) -> dict[str, Any] | JSONResponse:
        return await _transition(anomaly_id, "acknowledge")

    @router.post("/monitoring/anomalies/{anomaly_id}/resolve", response_model=None)
    async def resolve(anomaly_id: str, request: Request) -> dict[str, Any] | JSONResponse:
        body = await request.json() if await request.body() else {}
        return await _transition(anomaly_id, "resolve", body.get("resolution"))

    @router.post("/monitoring/anomalies/{anomaly_id}/false-positive", response_model=None)
    async def false_positive(anomaly_id: str) -> dict[str, Any] | JSONResponse:
        return await _transition(anomaly_id, "false-positive")

    @router.get("/monitoring/alerts/rules")
    async def list_rules() -> dict[str, Any]:
        state.calls["alert_rules"] += 1
        return {"data": list(state.rules.values())}

    @router.post("/monitoring/alerts/rules", response_model=None)
    async def create_rule(request: Request) -> dict[str, Any] | JSONResponse:
        state.calls["create_rule"] += 1
        body = await request.json()
        if not body.get("name"):
            return _error(400, "VALIDATION_ERROR", "Name is required")
        if not body.get("recipients"):
            return _error(400, "VALIDATION_ERROR", "At least one recipient is required")
        rule_id = f"r{len(state.rules) + 1}"
        rule = make_rule(rule_id, body["name"], enabled=body.get("enabled", True))
        rule.update({key: value for key, value in body.items() if key in rule})
        state.rules[rule_id] = rule
        return {"data": rule}

    @router.put("/monitoring/alerts/rules/{rule_id}", response_model=None)
    async def update_rule(rule_id: str, request: Request) -> dict[str, Any] | JSONResponse:
        state.calls["update_rule"] += 1
        rule = state.rules.get(rule_id)
        if rule is None:
            return _error(404, "NOT_FOUND", "Alert rule not found")
        body = await request.json()
        rule.update({key: value for key, value in body.items() if key in rule})
        rule["updatedAt"] = _utc_now()
        return {"message": "Alert rule updated"}

    @router.delete("/monitoring/alerts/rules/{rule_id}", response_model=None)
    async def delete_rule(rule_id: str) -> dict[str, Any] | JSONResponse:
        state.calls["delete_rule"] += 1
        if state.rules.pop(rule_id, None) is None:
            return _error(404, "NOT_FOUND", "Alert rule not found")
        return {"message": "Alert rule deleted"}

    @router.post("/monitoring/alerts/rules/{rule_id}/test", response_model=None)
    async def test_rule(rule_id: str) -> dict[str, Any] | JSONResponse:
        state.calls["test_rule"] += 1
        rule = state.rules.get(rule_id)
        if rule is None:
            return _error(404, "NOT_FOUND", "Alert rule not found")
        return {"success": True, "message": f"Test notification sent to {len(rule['recipients'])} recipient(s)"}

    @router.get("/monitoring/alerts/history")
    async def alert_history(ruleId: str | None = None, status: str | None = None, limit: int = 50) -> dict[str, Any]:  # noqa: N803
        state.calls["alert_history"] += 1
        rows = [
            row
            for row in state.history
            if (ruleId is None or row["ruleId"] == ruleId) and (status is None or row["status"] == status)
        ]
        return {"data": rows[:limit]}

    @router.post("/monitoring/alerts/digest")
    async def digest() -> dict[str, Any]:
        state.calls["digest"] += 1
        return {"message": "Daily digest sent"}

    @router.post("/ai-monitoring/assistant/chat", response_model=None)
    async def chat(request: Request) -> dict[str, Any] | JSONResponse:
        state.calls["chat"] += 1
        body = await request.json()
        state.chat_requests.append(body)
        if state.failing_chat_marker in body.get("message", ""):
            return _error(500, "ASSISTANT_ERROR", "Assistant backend unavailable")
        conversation_id = body.get("conversationId") or f"conv-{uuid4().hex[:8]}"
        return {
            "data": {
                "conversationId": conversation_id,
                "message": {
                    "id": uuid4().hex,
                    "role": "assistant",
                    "content": f"All systems nominal. {len(state.anomalies)} anomalies on record.",
                    "timestamp": _utc_now(),
                    "metadata": {"tokensUsed": 120, "latencyMs": 450.0},
                },
                "suggestedFollowUps": ["Show me open anomalies", "How much did we spend today?"],
            }
        }

    @router.get("/ai-monitoring/assistant/suggestions")
    async def suggestions() -> dict[str, Any]:
        state.calls["suggestions"] += 1
        return {
            "data": {
                "suggestions": ["What's the current system status?"],
                "basedOn": {"hasAnomalies": bool(state.anomalies), "hasCostWarning": False, "hasPerformanceIssues": False},
            }
        }

    app = FastAPI()
    app.include_router(router)
    return app
