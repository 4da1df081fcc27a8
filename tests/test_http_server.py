import asyncio

import pytest
from sse_starlette.sse import AppStatus
from starlette.testclient import TestClient

import consultant_http_server
from consultant_http_server import SESSION_HEADER, create_app, sse_event_stream


@pytest.fixture
def app(dispatcher):
    return create_app(dispatcher=dispatcher, keepalive_interval=0.01)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def _assert_cors(response):
    assert response.headers["access-control-allow-origin"] == "*"
    assert "POST" in response.headers["access-control-allow-methods"]
    assert "mcp-session-id" in response.headers["access-control-allow-headers"]
    assert response.headers["access-control-expose-headers"] == "mcp-session-id"


@pytest.mark.parametrize("path", ["/mcp", "/sse/message/abc", "/anything"])
def test_cors_preflight(client, path):
    response = client.options(
        path,
        headers={
            "Origin": "https://example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "mcp-session-id, content-type",
        },
    )

    assert response.status_code in (200, 204)
    assert response.content == b""
    _assert_cors(response)
    assert response.headers["access-control-max-age"] == "86400"


def test_health_endpoint_lists_tools(client):
    response = client.get("/health")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "healthy"
    assert payload["server"] == "consultant-jobs"
    assert "search_assignments" in payload["tools"]
    assert len(payload["tools"]) == 6
    _assert_cors(response)


@pytest.mark.parametrize("method", ["POST", "PUT", "DELETE"])
def test_health_answers_any_method(client, method):
    response = client.request(method, "/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_homepage_reports_status(client):
    response = client.get("/")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["endpoints"]["mcp"] == "/mcp"
    _assert_cors(response)


@pytest.mark.parametrize(
    "method, path",
    [("GET", "/nowhere"), ("GET", "/mcp"), ("DELETE", "/mcp"), ("POST", "/sse")],
)
def test_unknown_routes_return_json_404(client, method, path):
    response = client.request(method, path)

    assert response.status_code == 404
    assert response.json() == {
        "error": "Not found",
        "endpoints": {"mcp": "/mcp (POST)", "health": "/health"},
    }
    _assert_cors(response)


def test_initialize_returns_session_header(client, sessions):
    response = client.post(
        "/mcp",
        json={
            "jsonrpc": "2.0",
            "id": 123,
            "method": "initialize",
            "params": {"protocolVersion": "2024-11-05", "capabilities": {}},
        },
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/json")
    session_id = response.headers[SESSION_HEADER]
    assert sessions.contains(session_id)
    body = response.json()
    assert body["id"] == 123
    assert body["result"]["protocolVersion"] == "2024-11-05"
    assert "_sessionId" not in body
    _assert_cors(response)


def test_initialize_echoes_supplied_session(client):
    response = client.post(
        "/mcp",
        headers={SESSION_HEADER: "client-chosen"},
        json={"jsonrpc": "2.0", "id": 1, "method": "initialize"},
    )

    assert response.headers[SESSION_HEADER] == "client-chosen"


def test_non_initialize_calls_do_not_set_session_header(client):
    response = client.post("/mcp", json={"jsonrpc": "2.0", "id": "t", "method": "tools/list"})

    assert response.status_code == 200
    assert SESSION_HEADER not in response.headers
    assert len(response.json()["result"]["tools"]) == 6


def test_notification_returns_no_content(client):
    response = client.post("/mcp", json={"jsonrpc": "2.0", "method": "notifications/initialized"})

    assert response.status_code == 204
    assert response.content == b""
    _assert_cors(response)


@pytest.mark.parametrize("body", [b"{not json", b"", b"[1, 2]", b'"ping"'])
def test_malformed_body_is_parse_error(client, body):
    response = client.post("/mcp", content=body, headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert response.json() == {
        "jsonrpc": "2.0",
        "id": None,
        "error": {"code": -32700, "message": "Parse error"},
    }
    _assert_cors(response)


def test_tools_call_over_http(client, fake_client):
    response = client.post(
        "/mcp",
        json={
            "jsonrpc": "2.0",
            "id": 9,
            "method": "tools/call",
            "params": {"name": "get_assignment", "arguments": {"id": "ghost"}},
        },
    )

    assert response.status_code == 200
    text = response.json()["result"]["content"][0]["text"]
    assert text == "Assignment 'ghost' not found."
    assert fake_client.job_calls == ["ghost"]


def test_sse_message_endpoint_replies_synchronously(client, sessions):
    response = client.post(
        "/sse/message/stream-session",
        json={"jsonrpc": "2.0", "id": 1, "method": "initialize"},
    )

    assert response.status_code == 200
    assert response.json()["result"]["serverInfo"]["name"] == "consultant-jobs"
    assert SESSION_HEADER not in response.headers
    assert sessions.contains("stream-session")


def test_sse_message_endpoint_handles_notifications_and_parse_errors(client):
    notification = client.post("/sse/message/abc", json={"jsonrpc": "2.0", "method": "notifications/initialized"})
    malformed = client.post("/sse/message/abc", content=b"oops")

    assert notification.status_code == 204
    assert malformed.status_code == 400
    assert malformed.json()["error"]["code"] == -32700


@pytest.fixture
def fresh_exit_event(monkeypatch):
    # sse-starlette keeps its shutdown event on a class attribute bound to the first event loop
    monkeypatch.setattr(AppStatus, "should_exit_event", None, raising=False)


def test_sse_event_stream_starts_with_endpoint_event(caplog):
    async def take_first_event():
        stream = sse_event_stream("http://testserver/sse/message/s1")
        first = await stream.__anext__()
        pending = asyncio.ensure_future(stream.__anext__())
        await asyncio.sleep(0.01)
        still_open = not pending.done()
        pending.cancel()
        with pytest.raises(asyncio.CancelledError):
            await pending
        return first, still_open

    with caplog.at_level("INFO"):
        first, still_open = asyncio.run(take_first_event())

    assert first == {"event": "endpoint", "data": "http://testserver/sse/message/s1"}
    assert still_open
    assert any("SSE stream for http://testserver/sse/message/s1 closed" in r.getMessage() for r in caplog.records)


def test_sse_endpoint_registers_session_and_names_message_url(app, sessions, caplog, fresh_exit_event):
    sent = []

    async def run():
        disconnected = asyncio.Event()

        async def receive():
            await disconnected.wait()
            return {"type": "http.disconnect"}

        async def send(message):
            sent.append(message)
            if message["type"] == "http.response.body" and message.get("body", b"").startswith(b": ping"):
                disconnected.set()

        scope = {
            "type": "http",
            "http_version": "1.1",
            "method": "GET",
            "scheme": "http",
            "server": ("testserver", 80),
            "client": ("testclient", 50000),
            "path": "/sse",
            "raw_path": b"/sse",
            "root_path": "",
            "query_string": b"",
            "headers": [(b"host", b"testserver")],
        }
        await asyncio.wait_for(app(scope, receive, send), timeout=5)

    with caplog.at_level("INFO"):
        asyncio.run(run())

    start = sent[0]
    assert start["type"] == "http.response.start"
    headers = dict(start["headers"])
    assert headers[b"content-type"].startswith(b"text/event-stream")
    assert headers[b"access-control-expose-headers"] == b"mcp-session-id"

    bodies = [m["body"].decode() for m in sent if m["type"] == "http.response.body" and m.get("body")]
    assert bodies[0].startswith("event: endpoint\ndata: http://testserver/sse/message/")
    assert bodies[1] == ": ping\n\n"

    session_id = bodies[0].strip().rsplit("/", 1)[-1]
    assert sessions.list_active_sessions() == [session_id]
    assert any("closed" in record.getMessage() for record in caplog.records)


def test_module_exposes_default_app():
    assert consultant_http_server.app is not None
