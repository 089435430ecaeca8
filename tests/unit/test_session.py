"""
Unit tests for conversation session state.
"""

import pytest

from lightspeed.context import ResourceDescriptor
from lightspeed.enums import AttachmentType, Who
from lightspeed.session import (
    ChatTurn,
    ConversationSession,
    EmptyPromptError,
    ReferencedDoc,
    SessionBusyError,
    parse_references,
)


@pytest.fixture
def session():
    return ConversationSession()


class TestParseReferences:
    def test_keeps_valid_entries_in_order(self):
        raw = [
            {"docs_url": "https://docs.example.com/pods", "title": "Pods"},
            {"docs_url": "https://docs.example.com/jobs", "title": "Jobs"},
        ]
        assert parse_references(raw) == (
            ReferencedDoc("https://docs.example.com/pods", "Pods"),
            ReferencedDoc("https://docs.example.com/jobs", "Jobs"),
        )

    def test_drops_malformed_entries(self):
        raw = [
            {"docs_url": "https://docs.example.com/pods"},
            {"docs_url": 42, "title": "Bad URL"},
            None,
            "https://docs.example.com",
            {"docs_url": "https://docs.example.com/ok", "title": "OK"},
        ]
        assert parse_references(raw) == (ReferencedDoc("https://docs.example.com/ok", "OK"),)

    def test_missing(self):
        assert parse_references(None) == ()


class TestSubmit:
    def test_empty_prompt_rejected(self, session):
        with pytest.raises(EmptyPromptError):
            session.submit("   \n\t")

        assert session.history == ()
        assert not session.is_waiting

    def test_uses_pending_query_by_default(self, session):
        session.set_query("What is a Pod?")
        pending = session.submit()

        assert pending.query == "What is a Pod?"
        assert session.query == ""

    def test_records_user_turn_and_waits(self, session):
        pending = session.submit("What is a Pod?")

        assert session.history == (ChatTurn(who=Who.USER, text="What is a Pod?", attachments=()),)
        assert session.is_waiting
        assert pending.conversation_id is None
        assert pending.token == 1

    def test_attachments_snapshot_and_cleared(self, session):
        session.attachments.add(AttachmentType.YAML, "Pod", "nginx", "default", "kind: Pod")

        pending = session.submit("Why?")

        user_turn = session.history[0]
        assert len(user_turn.attachments) == 1
        assert user_turn.attachments[0].name == "nginx"
        assert "full resource YAML for Pod 'nginx'" in pending.query
        assert len(session.attachments) == 0

    def test_keeps_raw_prompt_text(self, session):
        session.attachments.add(AttachmentType.YAML, "Pod", "nginx", "default", "kind: Pod")
        session.submit("  Why?  ")

        assert session.history[0].text == "  Why?  "

    def test_single_flight(self, session):
        session.submit("first")

        with pytest.raises(SessionBusyError):
            session.submit("second")

        assert len(session.history) == 1


class TestSettle:
    def test_success_scenario(self, session):
        pending = session.submit("What is a Pod?")

        turn = session.on_response_success(pending.token, "abc", "A Pod is...", False, [])

        assert session.conversation_id == "abc"
        assert len(session.history) == 2
        assert turn.who == Who.AI
        assert turn.text == "A Pod is..."
        assert turn.error is None
        assert not turn.is_truncated
        assert turn.attachments is None
        assert not session.is_waiting

    def test_conversation_id_reused(self, session):
        pending = session.submit("first")
        session.on_response_success(pending.token, "abc", "one")

        pending = session.submit("second")

        assert pending.conversation_id == "abc"

    @pytest.mark.parametrize("truncated,expected", [(True, True), (False, False), ("true", False), (None, False)])
    def test_truncated_only_when_true(self, session, truncated, expected):
        pending = session.submit("q")
        turn = session.on_response_success(pending.token, "abc", "a", truncated)
        assert turn.is_truncated is expected

    def test_references_filtered(self, session):
        pending = session.submit("q")
        turn = session.on_response_success(
            pending.token, "abc", "a", False, [{"docs_url": "u", "title": "t"}, {"title": "no url"}]
        )
        assert turn.references == (ReferencedDoc("u", "t"),)

    def test_ai_turn_has_feedback_state(self, session):
        pending = session.submit("q")
        turn = session.on_response_success(pending.token, "abc", "a")
        assert turn.user_feedback is not None
        assert turn.user_feedback.sentiment is None

    def test_failure(self, session):
        pending = session.submit("q")

        turn = session.on_response_failure(pending.token, "Service unavailable")

        assert turn.error == "Service unavailable"
        assert turn.is_truncated is False
        assert turn.user_feedback is None
        assert not session.is_waiting
        assert session.conversation_id is None

    def test_stale_token_dropped(self, session):
        pending = session.submit("q")

        assert session.on_response_success(pending.token + 1, "abc", "a") is None
        assert session.is_waiting
        assert len(session.history) == 1

    def test_settle_when_idle_dropped(self, session):
        assert session.on_response_failure(0, "boom") is None
        assert session.history == ()


class TestReset:
    def test_clears_everything_together(self, session):
        pending = session.submit("q")
        session.on_response_success(pending.token, "abc", "a")
        session.attachments.add(AttachmentType.YAML, "Pod", "nginx", "default", "kind: Pod")
        session.set_context(ResourceDescriptor("Pod", "nginx", "default"))
        session.set_query("draft")

        session.reset()

        assert session.conversation_id is None
        assert session.history == ()
        assert len(session.attachments) == 0
        assert session.context is None
        assert session.query == ""
        assert session.is_empty

    def test_response_after_reset_dropped(self, session):
        pending = session.submit("q")
        session.reset()

        assert session.on_response_success(pending.token, "abc", "late") is None
        assert session.conversation_id is None
        assert session.history == ()
        assert not session.is_waiting

    def test_submit_allowed_after_reset_while_waiting(self, session):
        session.submit("q")
        session.reset()

        pending = session.submit("again")

        assert pending.conversation_id is None
        assert session.is_waiting


class TestTurnLookup:
    def test_positions_are_stable(self, session):
        pending = session.submit("q1")
        session.on_response_success(pending.token, "abc", "a1")
        pending = session.submit("q2")
        session.on_response_failure(pending.token, "boom")

        assert session.turn(1).text == "a1"
        assert session.turn(3).error == "boom"

    def test_negative_index(self, session):
        session.submit("q")
        with pytest.raises(IndexError):
            session.turn(-1)
