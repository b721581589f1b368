from fastapi.testclient import TestClient


def _client(monkeypatch) -> TestClient:
    # Import after environment setup so no LLM fallback is configured.
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    from agent_viz.api.main import app

    return TestClient(app)


def test_api_extract_visualize_trace_metrics(monkeypatch) -> None:
    client = _client(monkeypatch)

    table = "| Service | Errors |\n|---|---|\n| auth | 245 |\n| payment | 89 |\n"
    extract_resp = client.post("/extract", json={"content": table})
    assert extract_resp.status_code == 200
    payload = extract_resp.json()
    assert payload["method"] == "pattern"
    assert payload["fallbackUsed"] is False
    assert payload["pattern"]["type"] == "table"

    none_resp = client.post("/extract", json={"content": "Nothing to chart here."})
    assert none_resp.status_code == 200
    assert none_resp.json()["method"] == "none"

    visualize_resp = client.post(
        "/visualize",
        json={"content": 'Usage: {"timestamp": ["10:00", "11:00"], "cpu": [40, 55]}'},
    )
    assert visualize_resp.status_code == 200
    (item,) = visualize_resp.json()["items"]
    assert item["source"] == "pattern"
    assert item["chart"]["kind"] == "timeseries"
    assert item["chart"]["series"][0]["key"] == "cpu"

    traces_resp = client.get("/traces", params={"limit": 5})
    assert traces_resp.status_code == 200
    trace_id = traces_resp.json()["items"][0]["trace_id"]
    assert client.get(f"/traces/{trace_id}").status_code == 200
    assert client.get("/traces/missing").status_code == 404

    metrics_resp = client.get("/metrics")
    assert metrics_resp.status_code == 200
    assert metrics_resp.json()["total_extractions"] >= 2


def test_api_rejects_empty_content(monkeypatch) -> None:
    client = _client(monkeypatch)

    assert client.post("/extract", json={"content": ""}).status_code == 422


def test_api_stream_parse_replays_turn(monkeypatch) -> None:
    client = _client(monkeypatch)

    resp = client.post(
        "/stream/parse",
        json={
            "chunks": [
                {"type": "system", "subtype": "init"},
                {"type": "assistant_text", "text": "Let me "},
                {"type": "assistant_text", "text": "check the logs. Found 3 errors.\n"},
                {"type": "assistant_tool_use", "id": "t1", "name": "mcp__logs__search", "input": {}},
                {"type": "assistant_tool_result", "toolUseId": "t1", "content": "3 hits"},
                {"type": "assistant_tool_result", "toolUseId": "nope", "content": "?"},
                {"type": "assistant_text", "text": "| a | b |\n|---|---|\n| 1 | 2 |\n"},
                {"type": "bogus"},
            ],
            "strip_visualized": True,
        },
    )

    assert resp.status_code == 200
    payload = resp.json()
    assert payload["displayed_text"] == "Found 3 errors."
    assert payload["accumulated_text"].startswith("Let me check the logs.")
    assert payload["hints"] == ["Agent initialized, processing query...", "Calling tool: search"]
    assert [call["name"] for call in payload["tool_calls"]] == ["mcp__logs__search"]
    results = [chunk for chunk in payload["chunks"] if chunk["kind"] == "tool_result"]
    assert [chunk["name"] for chunk in results] == ["mcp__logs__search", "unknown"]


def test_api_health(monkeypatch) -> None:
    client = _client(monkeypatch)

    payload = client.get("/health").json()

    assert payload["status"] == "ok"
    assert payload["llm_configured"] is False
    assert payload["extraction"]["fallback"] is None
