"""Tests for the HTTP and Socket.IO chat panel shell."""

import pytest
from dependency_injector import providers

from ollama_assistant.core.domain.errors import TransportError
from ollama_assistant.entrypoints.web import create_app
from ollama_assistant.infrastructure.di.container import create_container


@pytest.fixture
def web(fake_client, workspace_dir):
    container = create_container({"workspace_root": str(workspace_dir), "default_model": "a"})
    container.inference_client.override(providers.Object(fake_client))
    app, socketio, _ = create_app(container)
    app.config["TESTING"] = True
    return app, socketio


@pytest.fixture
def http(web):
    return web[0].test_client()


@pytest.fixture
def session_id(http):
    return http.post("/api/sessions", json={}).get_json()["session_id"]


@pytest.fixture
def sio(web):
    app, socketio = web
    return socketio.test_client(app)


def received(client):
    return [(event["name"], event["args"][0]) for event in client.get_received()]


class TestRoutes:
    def test_health_check(self, http):
        assert http.get("/api/health-check").get_json() == {"status": "ok"}

    def test_models(self, http):
        models = http.get("/api/models").get_json()["models"]
        assert [m["name"] for m in models] == ["a", "b"]

    def test_models_failure(self, http, fake_client):
        fake_client.list_error = TransportError("HTTP error! status: 500", status=500)
        response = http.get("/api/models")
        assert response.status_code == 502
        assert "HTTP error! status: 500" in response.get_json()["error"]

    def test_create_session(self, http):
        data = http.post("/api/sessions", json={}).get_json()
        assert data["session_id"]
        assert data["model"] == "a"

    def test_create_session_restores_state(self, http):
        state = {"model": "b", "history": [{"role": "user", "content": "hi"}]}
        session_id = http.post("/api/sessions", json={"state": state}).get_json()["session_id"]

        history = http.get("/api/history", headers={"X-Session-Id": session_id}).get_json()
        assert history["model"] == "b"
        assert [turn["content"] for turn in history["history"]] == ["hi"]

    @pytest.mark.parametrize("body", [
        {"state": ["not", "an", "object"]},
        {"state": {"history": [{"role": "user"}]}},
        ["state"],
    ])
    def test_create_session_rejects_malformed_state(self, http, body):
        response = http.post("/api/sessions", json=body)

        assert response.status_code == 400
        assert response.get_json()["error"]

    def test_history_from_cookie(self, http, session_id):
        data = http.get("/api/history").get_json()
        assert data == {"model": "a", "history": []}

    def test_history_from_header(self, web, session_id):
        response = web[0].test_client().get("/api/history", headers={"X-Session-Id": session_id})
        assert response.status_code == 200

    def test_history_without_session(self, web):
        assert web[0].test_client().get("/api/history").status_code == 404

    def test_delete_session(self, web, http, session_id):
        assert http.delete(f"/api/sessions/{session_id}").get_json() == {"success": True}
        response = web[0].test_client().get("/api/history", headers={"X-Session-Id": session_id})
        assert response.status_code == 404


class TestSocketEvents:
    def test_join_session(self, sio, session_id):
        sio.emit("join_session", {"session_id": session_id})
        assert received(sio) == [("session_joined", {"status": "success"})]

    def test_join_unknown_session(self, sio):
        sio.emit("join_session", {"session_id": "missing"})
        assert received(sio) == [("session_joined", {"status": "error", "message": "Invalid session"})]

    def test_plain_message(self, sio, session_id):
        sio.emit("send_message", {"session_id": session_id, "text": "hello"})

        events = received(sio)
        assert [name for name, _ in events] == ["thinking", "response"]
        payload = events[1][1]
        assert payload["text"] == "Hello from the model"
        assert [turn["role"] for turn in payload["history"]] == ["user", "assistant"]

    def test_command_skips_thinking(self, sio, session_id, fake_client):
        sio.emit("send_message", {"session_id": session_id, "text": "@info"})

        events = received(sio)
        assert [name for name, _ in events] == ["response"]
        assert events[0][1]["text"] == "Current model: a"
        assert len(events[0][1]["history"]) == 2
        assert fake_client.chat_calls == []

    def test_inference_failure(self, sio, session_id, fake_client):
        fake_client.chat_error = TransportError("HTTP error! status: 500", status=500)
        sio.emit("send_message", {"session_id": session_id, "text": "hello"})

        assert received(sio) == [
            ("thinking", {"text": "Thinking..."}),
            ("error", {"text": "Error: HTTP error! status: 500"}),
        ]

    def test_invalid_session(self, sio):
        sio.emit("send_message", {"session_id": "missing", "text": "hello"})
        assert received(sio) == [("error", {"text": "Error: Invalid session"})]

    def test_empty_message(self, sio, session_id):
        sio.emit("send_message", {"session_id": session_id, "text": "   "})
        assert received(sio) == [("error", {"text": "Error: Empty message"})]

    def test_change_model_clears_history(self, sio, http, session_id):
        sio.emit("send_message", {"session_id": session_id, "text": "hello"})
        sio.get_received()

        sio.emit("change_model", {"session_id": session_id, "model": "b"})

        assert received(sio) == [("model_changed", {"model": "b"})]
        assert http.get("/api/history").get_json() == {"model": "b", "history": []}

    def test_clear_history(self, sio, http, session_id):
        sio.emit("send_message", {"session_id": session_id, "text": "hello"})
        sio.get_received()

        sio.emit("clear_history", {"session_id": session_id})

        assert received(sio) == [("history_cleared", {})]
        assert http.get("/api/history").get_json()["history"] == []

    def test_saved_state_is_replayed_when_panel_returns(self, sio, session_id):
        state = {"model": "b", "history": [{"role": "user", "content": "kept"}]}
        sio.emit("save_state", {"session_id": session_id, "state": state})
        sio.emit("panel_visible", {"session_id": session_id})

        assert received(sio) == [("panel_state", state)]

    def test_saved_state_that_is_not_an_object_falls_back_to_live_session(self, sio, session_id):
        sio.emit("save_state", {"session_id": session_id, "state": ["junk"]})
        sio.emit("panel_visible", {"session_id": session_id})

        assert received(sio) == [("panel_state", {"history": [], "model": "a"})]

    def test_panel_without_saved_state(self, sio, session_id):
        sio.emit("panel_visible", {"session_id": session_id})
        assert received(sio) == [("panel_state", {"history": [], "model": "a"})]

    def test_sessions_do_not_share_history(self, sio, http, session_id):
        other = http.post("/api/sessions", json={}).get_json()["session_id"]
        sio.emit("send_message", {"session_id": session_id, "text": "hello"})
        sio.get_received()

        sio.emit("panel_visible", {"session_id": other})
        assert received(sio) == [("panel_state", {"history": [], "model": "a"})]
