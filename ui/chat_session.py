"""Chat page state: document selection and the message transcript."""

import html
import logging
import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from ui.helpers import UploadedDocument
from ui.markup import render_rich_text

logger = logging.getLogger(__name__)

FAILURE_MESSAGE = "We could not reach the chat service. Please try again shortly."
RESET_MESSAGE = "Chat history reset. Select a document and ask a new question."
CONTEXT_CLEARED_MESSAGE = "Context cleared. Select at least one document to ground the chat."

# (question, selected document ids) -> answer text
SendFn = Callable[[str, list[str]], str]


class MessageRole(str, Enum):
    """Author of a transcript entry."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class SelectionState(str, Enum):
    """Tri-state of the select-all control."""

    NONE = "none"
    PARTIAL = "partial"
    ALL = "all"


@dataclass(frozen=True)
class ChatMessage:
    """Single transcript entry."""

    role: MessageRole
    text: str
    documents: tuple[str, ...] = ()
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def html(self) -> str:
        return render_rich_text(self.text)


@dataclass(frozen=True)
class PendingQuestion:
    """Question accepted for sending, with the selection it was asked under."""

    question: str
    documents: tuple[str, ...]


def describe_context_change(count: int) -> str:
    if count == 0:
        return CONTEXT_CLEARED_MESSAGE
    plural = "" if count == 1 else "s"
    return f"I'm now using {count} document{plural} for context in our conversation."


class ChatSession:
    """Selection set and transcript for one browser session.

    The selection only frames the conversation for the user; it is sent
    along with each question but the server does not scope retrieval by it.
    """

    def __init__(self) -> None:
        self.documents: list[UploadedDocument] = []
        self.messages: list[ChatMessage] = []
        self.sending = False
        self._selected: set[str] = set()
        self._pending_document_id: str | None = None

    # --- selection ---

    @property
    def selected_ids(self) -> tuple[str, ...]:
        """Selected ids in document-list order."""
        return tuple(doc.id for doc in self.documents if doc.id in self._selected)

    @property
    def selected_count(self) -> int:
        return len(self._selected)

    @property
    def has_selection(self) -> bool:
        return bool(self._selected)

    @property
    def selected_documents(self) -> list[UploadedDocument]:
        return [doc for doc in self.documents if doc.id in self._selected]

    @property
    def selection_state(self) -> SelectionState:
        if not self._selected:
            return SelectionState.NONE
        if self.documents and len(self._selected) == len(self.documents):
            return SelectionState.ALL
        return SelectionState.PARTIAL

    @property
    def context_status(self) -> str:
        count = len(self._selected)
        if count == 0:
            return "No documents selected"
        return "1 document selected" if count == 1 else f"{count} documents selected"

    def is_selected(self, document_id: str) -> bool:
        return document_id in self._selected

    def set_documents(self, documents: Iterable[UploadedDocument]) -> None:
        """Replace the document list after a re-fetch.

        Selected ids that disappeared are dropped, and a pending deep-link
        selection is applied once its document shows up.
        """
        self.documents = list(documents)
        self._prune_selection()
        self._apply_pending_selection()

    def request_document(self, document_id: str) -> None:
        """Preselect a document (deep link); waits until the document is listed."""
        self._pending_document_id = document_id
        self._apply_pending_selection()

    def toggle_select_all(self, checked: bool) -> None:
        selection = {doc.id for doc in self.documents} if checked else set()
        self._set_selection(selection)

    def toggle_document(self, document_id: str, checked: bool) -> None:
        selection = set(self._selected)
        if checked:
            selection.add(document_id)
        else:
            selection.discard(document_id)
        self._set_selection(selection)

    def _set_selection(self, selection: set[str]) -> None:
        if selection == self._selected:
            return
        self._selected = selection
        self._announce_context_change()

    def _prune_selection(self) -> None:
        if not self._selected:
            return
        valid_ids = {doc.id for doc in self.documents}
        self._set_selection(self._selected & valid_ids)

    def _apply_pending_selection(self) -> None:
        pending = self._pending_document_id
        if not pending or not any(doc.id == pending for doc in self.documents):
            return
        self._pending_document_id = None
        self._selected = {pending}
        self._announce_context_change()

    def _announce_context_change(self) -> None:
        self._append(MessageRole.SYSTEM, describe_context_change(len(self._selected)))

    # --- transcript ---

    def can_send(self, draft: str) -> bool:
        return bool(draft.strip()) and self.has_selection and not self.sending

    def begin_send(self, draft: str) -> PendingQuestion | None:
        """Append the user's message and mark a request in flight.

        Returns:
            The accepted question, or None when sending is not allowed
        """
        if not self.can_send(draft):
            return None
        pending = PendingQuestion(question=draft.strip(), documents=self.selected_ids)
        self._append(MessageRole.USER, pending.question, pending.documents)
        self.sending = True
        return pending

    def complete_send(self, answer: str, documents: tuple[str, ...] = ()) -> None:
        self._append(MessageRole.ASSISTANT, answer, documents)
        self.sending = False

    def fail_send(self, documents: tuple[str, ...] = ()) -> None:
        self._append(MessageRole.SYSTEM, FAILURE_MESSAGE, documents)
        self.sending = False

    def resolve_send(self, pending: PendingQuestion, send: SendFn) -> None:
        """Run the chat call for an accepted question and record the outcome.

        Any failure, including a reply that cannot be read, ends the send
        with FAILURE_MESSAGE so the input is enabled again.
        """
        try:
            answer = send(pending.question, list(pending.documents))
        except Exception:
            logger.exception("Chat request failed")
            self.fail_send(pending.documents)
            return
        self.complete_send(answer, pending.documents)

    def clear(self) -> None:
        self.messages = [ChatMessage(role=MessageRole.ASSISTANT, text=RESET_MESSAGE)]
        self.sending = False

    def _append(self, role: MessageRole, text: str, documents: tuple[str, ...] | None = None) -> None:
        if documents is None:
            documents = self.selected_ids
        self.messages = [*self.messages, ChatMessage(role=role, text=text, documents=documents)]

    # --- labels ---

    def document_label(self, document_id: str) -> str:
        match = next((doc for doc in self.documents if doc.id == document_id), None)
        return match.file_name if match else "the selected document"

    def selected_document_preview(self) -> str:
        names = [doc.file_name for doc in self.selected_documents]
        if not names:
            return "Select at least one document to provide chat context."
        if len(names) <= 2:
            return ", ".join(names)
        return f"{names[0]}, {names[1]} +{len(names) - 2} more"

    def message_context_label(self, message: ChatMessage) -> str | None:
        if not message.documents:
            return None
        first = self.document_label(message.documents[0])
        if len(message.documents) == 1:
            return first
        return f"{first} +{len(message.documents) - 1} more"

    def message_html(self, message: ChatMessage) -> str:
        """Final HTML for one transcript entry; the page inserts it unchanged."""
        block = f'<div class="askdocs-message">{message.html}</div>'
        label = self.message_context_label(message)
        if label:
            block += (
                '<div class="askdocs-message-context" style="font-size: 0.8em; opacity: 0.7;">'
                f"📎 {html.escape(label)}</div>"
            )
        return block
