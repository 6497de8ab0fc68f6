"""Tests for the conversation use case."""

import pytest

from ollama_assistant.core.domain.errors import FormatError, TransportError
from ollama_assistant.core.domain.models import ASSISTANT, USER


class TestPlainChat:
    def test_first_message(self, conversation, fake_client, session):
        assert conversation.handle_message("hello") == "Hello from the model"

        assert fake_client.chat_calls == [("a", [{"role": USER, "content": "hello"}])]
        assert [(t.role, t.content) for t in session.history] == [
            (USER, "hello"), (ASSISTANT, "Hello from the model")
        ]

    def test_whole_transcript_is_sent(self, conversation, fake_client):
        conversation.handle_message("one")
        conversation.handle_message("two")

        _, messages = fake_client.chat_calls[1]
        assert [m["content"] for m in messages] == ["one", "Hello from the model", "two"]

    def test_workspace_context_prefix(self, conversation, fake_client):
        conversation.set_workspace_context("TREE")
        conversation.handle_message("where is main?")

        content = fake_client.chat_calls[0][1][-1]["content"]
        assert content == "Workspace Context:\nTREE\n\nUser Question: where is main?"

    def test_file_context_wins_over_workspace(self, conversation, fake_client):
        conversation.set_workspace_context("TREE")
        conversation.set_file_context("a.js", "let x = 1")
        conversation.handle_message("what is x?")

        content = fake_client.chat_calls[0][1][-1]["content"]
        assert content == "Current File Context (a.js):\nlet x = 1\n\nUser Question: what is x?"

    def test_clear_context(self, conversation, fake_client):
        conversation.set_file_context("a.js", "let x = 1")
        conversation.clear_context()
        conversation.handle_message("plain")
        assert fake_client.chat_calls[0][1][-1]["content"] == "plain"

    def test_inference_failure_propagates(self, conversation, fake_client, session):
        fake_client.chat_error = TransportError("HTTP error! status: 500", status=500)

        with pytest.raises(TransportError):
            conversation.handle_message("hello")

        assert [t.role for t in session.history] == [USER]


class TestCommands:
    def test_run_command_records_both_turns(self, conversation, session, fake_client):
        assert conversation.run_command("@info") == "Current model: a"
        assert [(t.role, t.content) for t in session.history] == [(USER, "@info"), (ASSISTANT, "Current model: a")]
        assert fake_client.chat_calls == []

    def test_handle_input_routes_by_sigil(self, conversation, fake_client):
        assert conversation.handle_input("  @info") == "Current model: a"
        assert conversation.handle_input("hi") == "Hello from the model"
        assert len(fake_client.chat_calls) == 1


class TestSessionState:
    def test_set_model_clears_history(self, conversation):
        conversation.handle_message("hi")
        conversation.set_model("b")

        assert conversation.model == "b"
        assert conversation.get_history() == []

    def test_refresh_workspace_context(self, conversation, workspace, closed_workspace, session):
        assert conversation.refresh_workspace_context(workspace).startswith("Workspace Structure:")
        assert session.workspace_context.startswith("Workspace Structure:")

        assert conversation.refresh_workspace_context(closed_workspace) == ""
        assert session.workspace_context == ""

    def test_restore_state(self, conversation):
        conversation.restore_state({
            "model": "b",
            "history": [
                {"role": "user", "content": "hi", "timestamp": "2024-05-01T10:00:00Z"},
                {"role": "assistant", "content": "hello"},
            ],
        })

        assert conversation.model == "b"
        assert [t.content for t in conversation.get_history()] == ["hi", "hello"]
        assert conversation.get_history()[0].timestamp.year == 2024

    @pytest.mark.parametrize("state", [
        ["not", "an", "object"],
        {"history": "hi"},
        {"history": [{"role": "user"}]},
        {"history": [{"role": "user", "content": "hi", "timestamp": "yesterday"}]},
        {"history": [{"role": "user", "content": "hi", "timestamp": 12}]},
        {"model": 7, "history": []},
    ])
    def test_malformed_state_is_rejected_without_changes(self, conversation, state):
        conversation.handle_message("hi")

        with pytest.raises(FormatError, match="Invalid session state"):
            conversation.restore_state(state)

        assert conversation.model == "a"
        assert len(conversation.get_history()) == 2

    def test_restore_nothing(self, conversation):
        conversation.handle_message("hi")
        conversation.restore_state(None)
        assert len(conversation.get_history()) == 2

    def test_save_state(self, conversation):
        conversation.handle_message("hi")
        state = conversation.save_state()

        assert state["model"] == "a"
        assert [item["role"] for item in state["history"]] == [USER, ASSISTANT]
