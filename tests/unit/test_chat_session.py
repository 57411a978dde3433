"""Tests for chat page selection and transcript state."""

import httpx
import pytest

from ui.chat_session import (
    CONTEXT_CLEARED_MESSAGE,
    FAILURE_MESSAGE,
    RESET_MESSAGE,
    ChatMessage,
    ChatSession,
    MessageRole,
    SelectionState,
    describe_context_change,
)
from ui.helpers import UploadedDocument


def make_document(doc_id: str, file_name: str | None = None) -> UploadedDocument:
    return UploadedDocument(
        id=doc_id,
        file_name=file_name or doc_id.split("-", 1)[-1],
        size=1024,
        uploaded_on=None,
    )


@pytest.fixture
def session() -> ChatSession:
    chat = ChatSession()
    chat.set_documents(
        [
            make_document("a1-manual.pdf"),
            make_document("b2-pricing.xlsx"),
            make_document("c3-faq.docx"),
        ]
    )
    return chat


class TestSelection:
    """Test document selection."""

    def test_starts_with_nothing_selected(self, session: ChatSession) -> None:
        assert session.selection_state is SelectionState.NONE
        assert session.context_status == "No documents selected"
        assert session.messages == []

    def test_toggle_document_announces_context(self, session: ChatSession) -> None:
        session.toggle_document("a1-manual.pdf", True)

        assert session.selected_ids == ("a1-manual.pdf",)
        assert session.selection_state is SelectionState.PARTIAL
        assert session.context_status == "1 document selected"
        last = session.messages[-1]
        assert last.role is MessageRole.SYSTEM
        assert last.text == "I'm now using 1 document for context in our conversation."

    def test_select_all_and_clear(self, session: ChatSession) -> None:
        session.toggle_select_all(True)
        assert session.selection_state is SelectionState.ALL
        assert session.messages[-1].text == describe_context_change(3)

        session.toggle_select_all(False)
        assert session.selection_state is SelectionState.NONE
        assert session.messages[-1].text == CONTEXT_CLEARED_MESSAGE

    def test_unchanged_selection_is_not_announced(self, session: ChatSession) -> None:
        session.toggle_document("a1-manual.pdf", True)
        count = len(session.messages)

        session.toggle_document("a1-manual.pdf", True)
        session.toggle_document("unknown", False)

        assert len(session.messages) == count

    def test_selected_ids_follow_list_order(self, session: ChatSession) -> None:
        session.toggle_document("c3-faq.docx", True)
        session.toggle_document("a1-manual.pdf", True)

        assert session.selected_ids == ("a1-manual.pdf", "c3-faq.docx")

    def test_refetch_drops_missing_documents(self, session: ChatSession) -> None:
        session.toggle_select_all(True)

        session.set_documents([make_document("a1-manual.pdf")])

        assert session.selected_ids == ("a1-manual.pdf",)
        assert session.selection_state is SelectionState.ALL
        assert session.messages[-1].text == describe_context_change(1)

    def test_deep_link_waits_for_document(self) -> None:
        chat = ChatSession()
        chat.request_document("z9-later.pdf")
        assert chat.has_selection is False

        chat.set_documents([make_document("a1-manual.pdf"), make_document("z9-later.pdf")])

        assert chat.selected_ids == ("z9-later.pdf",)
        chat.set_documents([make_document("a1-manual.pdf"), make_document("z9-later.pdf")])
        assert len(chat.messages) == 1

    def test_deep_link_replaces_selection(self, session: ChatSession) -> None:
        session.toggle_select_all(True)

        session.request_document("b2-pricing.xlsx")

        assert session.selected_ids == ("b2-pricing.xlsx",)


class TestSend:
    """Test the send flow."""

    def test_cannot_send_without_selection(self, session: ChatSession) -> None:
        assert session.can_send("What is covered?") is False
        assert session.begin_send("What is covered?") is None

    def test_cannot_send_blank_draft(self, session: ChatSession) -> None:
        session.toggle_document("a1-manual.pdf", True)

        assert session.can_send("   ") is False

    def test_begin_send_appends_trimmed_question(self, session: ChatSession) -> None:
        session.toggle_document("a1-manual.pdf", True)

        pending = session.begin_send("  What is covered?  ")

        assert pending is not None
        assert pending.question == "What is covered?"
        assert pending.documents == ("a1-manual.pdf",)
        assert session.messages[-1].role is MessageRole.USER
        assert session.messages[-1].text == "What is covered?"
        assert session.sending is True
        assert session.can_send("Another question") is False

    def test_complete_and_fail(self, session: ChatSession) -> None:
        session.toggle_document("a1-manual.pdf", True)
        pending = session.begin_send("Q1")
        assert pending is not None

        session.complete_send("**Two** years.", pending.documents)
        assert session.messages[-1].role is MessageRole.ASSISTANT
        assert session.messages[-1].html == "<strong>Two</strong> years."
        assert session.sending is False

        pending = session.begin_send("Q2")
        assert pending is not None
        session.fail_send(pending.documents)
        assert session.messages[-1].role is MessageRole.SYSTEM
        assert session.messages[-1].text == FAILURE_MESSAGE
        assert session.sending is False

    def test_clear_leaves_reset_message(self, session: ChatSession) -> None:
        session.toggle_document("a1-manual.pdf", True)
        session.begin_send("Q1")

        session.clear()

        assert [m.text for m in session.messages] == [RESET_MESSAGE]
        assert session.sending is False
        assert session.selected_ids == ("a1-manual.pdf",)


class TestLabels:
    """Test label helpers."""

    def test_selected_document_preview(self, session: ChatSession) -> None:
        assert session.selected_document_preview().startswith("Select at least one")

        session.toggle_document("a1-manual.pdf", True)
        session.toggle_document("b2-pricing.xlsx", True)
        assert session.selected_document_preview() == "manual.pdf, pricing.xlsx"

        session.toggle_document("c3-faq.docx", True)
        assert session.selected_document_preview() == "manual.pdf, pricing.xlsx +1 more"

    def test_message_context_label(self, session: ChatSession) -> None:
        session.toggle_select_all(True)
        message = session.messages[-1]

        assert session.message_context_label(message) == "manual.pdf +2 more"

    def test_unknown_document_label(self, session: ChatSession) -> None:
        assert session.document_label("gone") == "the selected document"


class TestResolveSend:
    """Test resolve_send."""

    def test_records_answer(self, session: ChatSession) -> None:
        session.toggle_document("a1-manual.pdf", True)
        pending = session.begin_send("What is covered?")
        assert pending is not None
        calls: list[tuple[str, list[str]]] = []

        def send(question: str, ids: list[str]) -> str:
            calls.append((question, ids))
            return "Parts and labour."

        session.resolve_send(pending, send)

        assert calls == [("What is covered?", ["a1-manual.pdf"])]
        assert session.messages[-1].text == "Parts and labour."
        assert session.sending is False

    @pytest.mark.parametrize(
        "error",
        [
            ValueError("Expecting value: line 1 column 1 (char 0)"),
            httpx.ConnectError("connection refused"),
            RuntimeError("unexpected"),
        ],
    )
    def test_any_failure_reenables_input(self, session: ChatSession, error: Exception) -> None:
        session.toggle_document("a1-manual.pdf", True)
        pending = session.begin_send("What is covered?")
        assert pending is not None

        def send(question: str, ids: list[str]) -> str:
            raise error

        session.resolve_send(pending, send)

        assert session.messages[-1].text == FAILURE_MESSAGE
        assert session.sending is False
        assert session.can_send("Try again") is True


class TestMessageHtml:
    """Test the HTML inserted into the transcript."""

    def test_code_contents_stay_literal(self, session: ChatSession) -> None:
        message = ChatMessage(role=MessageRole.ASSISTANT, text="use `a *b* c` and # not_a_heading")

        block = session.message_html(message)

        assert "<code>a *b* c</code>" in block
        assert "# not_a_heading" in block
        assert "<em>" not in block

    def test_unsupported_markdown_is_not_interpreted(self, session: ChatSession) -> None:
        message = ChatMessage(role=MessageRole.ASSISTANT, text="# Summary\nsee _this_")

        block = session.message_html(message)

        assert "# Summary<br />see _this_" in block
        assert "<h1>" not in block
        assert "<em>" not in block

    def test_context_label_is_escaped(self) -> None:
        chat = ChatSession()
        chat.set_documents([make_document("a1-<b>x</b>.pdf")])
        chat.toggle_document("a1-<b>x</b>.pdf", True)

        block = chat.message_html(chat.messages[-1])

        assert "📎 &lt;b&gt;x&lt;/b&gt;.pdf" in block
        assert "<b>x</b>" not in block

    def test_no_label_without_documents(self, session: ChatSession) -> None:
        message = ChatMessage(role=MessageRole.ASSISTANT, text="Hello")

        assert session.message_html(message) == '<div class="askdocs-message">Hello</div>'
