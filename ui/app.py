"""Streamlit UI for AskDocs - document uploads and grounded chat.

Run with: streamlit run ui/app.py
"""

# Add project root to sys.path for imports to work when run via streamlit
import sys
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import os  # noqa: E402

import httpx  # noqa: E402
import streamlit as st  # noqa: E402

from ui.chat_session import ChatMessage, ChatSession, MessageRole, SelectionState  # noqa: E402
from ui.helpers import (  # noqa: E402
    delete_document,
    describe_content_type,
    format_document_meta,
    format_size,
    get_extension,
    list_documents,
    send_chat,
    upload_document,
)
from ui.notifications import ToastKind  # noqa: E402
from ui.upload_queue import (  # noqa: E402
    STATUS_LABELS,
    STATUS_NOTES,
    STATUS_PROGRESS,
    PendingFile,
    UploadQueue,
    UploadStatus,
)

# Configuration
BACKEND_URL = os.environ.get("ASKDOCS_BACKEND_URL", "http://localhost:8000")

PAGES = {"documents": "📁 Documents", "chat": "💬 Chat"}
AVATARS = {MessageRole.USER: "🧑", MessageRole.ASSISTANT: "🤖", MessageRole.SYSTEM: "ℹ️"}

# Page config
st.set_page_config(
    page_title="AskDocs",
    page_icon="📄",
    layout="wide",
)

# Initialize session state
if "upload_queue" not in st.session_state:
    st.session_state.upload_queue = UploadQueue(
        upload=lambda name, data, content_type: upload_document(
            BACKEND_URL, name, data, content_type
        )
    )
if "chat" not in st.session_state:
    st.session_state.chat = ChatSession()
if "documents" not in st.session_state:
    st.session_state.documents = None
if "documents_error" not in st.session_state:
    st.session_state.documents_error = ""
if "uploader_key" not in st.session_state:
    st.session_state.uploader_key = 0
if "seen_uploads" not in st.session_state:
    st.session_state.seen_uploads = 0

queue: UploadQueue = st.session_state.upload_queue
chat: ChatSession = st.session_state.chat


def load_documents() -> None:
    """Re-fetch the document list and hand it to the chat session."""
    try:
        st.session_state.documents = list_documents(BACKEND_URL)
        st.session_state.documents_error = ""
    except (httpx.HTTPError, ValueError):
        st.session_state.documents = st.session_state.documents or []
        st.session_state.documents_error = (
            "Unable to reach the upload service. Please refresh and try again."
        )
    chat.set_documents(st.session_state.documents)


def remove_document(document_id: str) -> None:
    if not delete_document(BACKEND_URL, document_id):
        st.session_state.documents_error = "Unable to delete document right now. Please try again."
        return
    load_documents()


def open_chat(document_id: str) -> None:
    """Deep link into the chat page with one document preselected."""
    st.query_params["page"] = "chat"
    st.query_params["documentId"] = document_id


def on_page_change() -> None:
    st.query_params["page"] = st.session_state.page_choice


if st.session_state.documents is None:
    load_documents()

# =============================================================================
# SIDEBAR - NAVIGATION + ACTIVITY
# =============================================================================
current_page = st.query_params.get("page", "documents")
if current_page not in PAGES:
    current_page = "documents"
st.session_state.page_choice = current_page

with st.sidebar:
    st.title("📄 AskDocs")
    st.radio(
        "Go to",
        options=list(PAGES),
        format_func=lambda page: PAGES[page],
        key="page_choice",
        on_change=on_page_change,
    )
    st.divider()

    notifications = queue.notifications
    activity_label = "🔔 Activity" + (" •" if notifications.has_activity_alert else "")
    st.button(activity_label, on_click=notifications.toggle_activity_overlay, use_container_width=True)
    if notifications.show_activity_overlay:
        events = notifications.activity
        if not events:
            st.caption("_No upload activity yet_")
        for event in events:
            icon = "✅" if event.kind is ToastKind.SUCCESS else "❌"
            st.markdown(f"{icon} **{event.title}**")
            if event.message:
                st.caption(event.message)
        st.button("Close", on_click=notifications.close_activity_overlay)


# =============================================================================
# DOCUMENTS PAGE
# =============================================================================
@st.fragment(run_every=1.0)
def render_upload_activity() -> None:
    """Queue and toasts, polled while the worker uploads in the background."""
    for toast in queue.notifications.active_toasts():
        col_text, col_close = st.columns([6, 1])
        with col_text:
            text = f"**{toast.title}**" + (f"  \n{toast.message}" if toast.message else "")
            if toast.kind is ToastKind.SUCCESS:
                st.success(text)
            else:
                st.error(text)
        col_close.button("✕", key=f"toast_{toast.id}", on_click=queue.notifications.dismiss, args=(toast.id,))

    for item in queue.items:
        st.markdown(
            f"`{get_extension(item.file_name)}` **{item.file_name}** · {format_size(item.size)} "
            f"· _{STATUS_LABELS[item.status]}_"
        )
        st.progress(STATUS_PROGRESS[item.status] / 100, text=item.message or STATUS_NOTES[item.status])
        if item.status is UploadStatus.ERROR:
            st.button("🔁 Retry", key=f"retry_{item.id}", on_click=queue.retry, args=(item.id,))

    if queue.uploads_completed != st.session_state.seen_uploads:
        st.session_state.seen_uploads = queue.uploads_completed
        load_documents()
        st.rerun()


def render_documents_page() -> None:
    st.header("📁 Documents")
    col_upload, col_docs = st.columns([1, 1.4])

    with col_upload:
        st.subheader("Upload")
        files = st.file_uploader(
            "Drop files here or browse",
            accept_multiple_files=True,
            key=f"uploader_{st.session_state.uploader_key}",
        )
        if files:
            queue.add_files(PendingFile(f.name, f.getvalue(), f.type) for f in files)
            # New key clears the uploader so the same files are not queued twice
            st.session_state.uploader_key += 1
            st.rerun()

        render_upload_activity()

    with col_docs:
        col_title, col_refresh = st.columns([4, 1])
        col_title.subheader("Uploaded documents")
        col_refresh.button("🔄", key="refresh_documents", on_click=load_documents)

        if st.session_state.documents_error:
            st.error(st.session_state.documents_error)

        documents = st.session_state.documents or []
        if not documents:
            st.info("No documents uploaded yet.")

        for document in documents:
            with st.container(border=True):
                col_info, col_chat, col_delete = st.columns([5, 1, 1])
                with col_info:
                    st.markdown(f"`{get_extension(document.file_name)}` **{document.file_name}**")
                    st.caption(format_document_meta(document))
                    st.caption(describe_content_type(document.content_type))
                col_chat.button("💬", key=f"chat_{document.id}", on_click=open_chat, args=(document.id,))
                col_delete.button(
                    "🗑️", key=f"delete_{document.id}", on_click=remove_document, args=(document.id,)
                )


# =============================================================================
# CHAT PAGE
# =============================================================================
def render_message(message: ChatMessage) -> None:
    # Tokenizer output is final HTML, inserted without a markdown pass
    with st.chat_message(message.role.value, avatar=AVATARS[message.role]):
        st.html(chat.message_html(message))


def render_chat_page() -> None:
    requested = st.query_params.get("documentId")
    if requested:
        chat.request_document(requested)
        del st.query_params["documentId"]

    st.header("💬 Chat")
    col_context, col_chat = st.columns([1, 2.2])

    with col_context:
        st.subheader("Context")
        st.caption(chat.context_status)
        st.button("🔄 Refresh documents", on_click=load_documents)

        if st.session_state.documents_error:
            st.error(st.session_state.documents_error)

        state = chat.selection_state
        if chat.documents:
            # Keys embed the current state so widgets follow selection changes made elsewhere
            st.checkbox(
                "Select all" + (" (partial)" if state is SelectionState.PARTIAL else ""),
                value=state is SelectionState.ALL,
                key=f"select_all_{state.value}",
                on_change=chat.toggle_select_all,
                args=(state is not SelectionState.ALL,),
            )
        else:
            st.info("Upload documents first to ground the chat.")

        for document in chat.documents:
            selected = chat.is_selected(document.id)
            st.checkbox(
                document.file_name,
                value=selected,
                key=f"select_{document.id}_{selected}",
                help=format_document_meta(document),
                on_change=chat.toggle_document,
                args=(document.id, not selected),
            )

        st.divider()
        st.caption(chat.selected_document_preview())
        st.button("🧹 Clear chat", on_click=chat.clear)

    with col_chat:
        for message in chat.messages:
            render_message(message)

        prompt = st.chat_input(
            "Ask a question about the selected documents",
            disabled=chat.sending or not chat.has_selection,
        )
        if prompt:
            pending = chat.begin_send(prompt)
            if pending is not None:
                # Optimistic echo while the request is in flight
                render_message(chat.messages[-1])
                with st.spinner("Thinking..."):
                    chat.resolve_send(
                        pending, lambda question, ids: send_chat(BACKEND_URL, question, ids)
                    )
                st.rerun()


if current_page == "chat":
    render_chat_page()
else:
    render_documents_page()
