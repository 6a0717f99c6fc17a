from zora_mcp.metrics import MetricsRecorder


def test_recent_durations_are_bounded():
    metrics = MetricsRecorder(recent_requests=2)
    for index in range(3):
        metrics.incr_request()
        metrics.record_duration(f"req-{index}", float(index))
    snapshot = metrics.snapshot()
    assert snapshot["requests"] == 3
    assert snapshot["recent_request_durations_ms"] == {"req-1": 1.0, "req-2": 2.0}


def test_tool_latency_accumulates_and_reset_clears():
    metrics = MetricsRecorder()
    metrics.record_tool("get_coin", success=True, duration_ms=1.5)
    metrics.record_tool("get_coin", success=False, error_code="EXTERNAL_CALL_FAILED", duration_ms=2.0)
    snapshot = metrics.snapshot()
    assert snapshot["tool_duration_ms"] == {"get_coin": 3.5}
    assert snapshot["error_codes"] == {"EXTERNAL_CALL_FAILED": 1}

    metrics.reset()
    assert metrics.snapshot()["tool_success"] == {}
    assert metrics.snapshot()["tool_duration_ms"] == {}
