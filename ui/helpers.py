"""Helper functions for UI - AskDocs API client and display formatting."""

import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
UPLOAD_TIMEOUT = 120.0
CHAT_TIMEOUT = 60.0

GENERIC_UPLOAD_ERROR = "Unexpected error while uploading. Please try again."
EMPTY_RESPONSE = "Received an empty response."
RESPONSE_WITHOUT_TEXT = "Received a response without text."

SIZE_UNITS = ["B", "KB", "MB", "GB"]

_TAG_RE = re.compile(r"<[^>]*>")


@dataclass(frozen=True)
class UploadedDocument:
    """Document as shown in the UI."""

    id: str
    file_name: str
    size: int
    uploaded_on: str | None
    content_type: str | None = None
    raw_name: str | None = None


@dataclass(frozen=True)
class UploadResult:
    """Outcome of one upload call; failures carry a user-facing message."""

    success: bool
    file_name: str
    document: UploadedDocument | None = None
    message: str | None = None


def _send(client: httpx.Client | None, method: str, url: str, **kwargs: Any) -> httpx.Response:
    """Send a request on the given client, or on a short-lived one."""
    if client is not None:
        return client.request(method, url, **kwargs)
    with httpx.Client(timeout=DEFAULT_TIMEOUT) as owned_client:
        return owned_client.request(method, url, **kwargs)


# --- API calls ---


def list_documents(backend_url: str, client: httpx.Client | None = None) -> list[UploadedDocument]:
    """Call GET /api/fileupload.

    Raises:
        httpx.HTTPError: If the request fails
    """
    response = _send(client, "GET", f"{backend_url}/api/fileupload")
    response.raise_for_status()
    return [to_uploaded_document(item) for item in response.json()]


def upload_document(
    backend_url: str,
    file_name: str,
    data: bytes,
    content_type: str | None = None,
    client: httpx.Client | None = None,
) -> UploadResult:
    """Call POST /api/fileupload with a multipart ``file`` field.

    Never raises for HTTP or network failures; those come back as an
    unsuccessful UploadResult with a readable message.
    """
    try:
        response = _send(
            client,
            "POST",
            f"{backend_url}/api/fileupload",
            files={"file": (file_name, data, content_type or "application/octet-stream")},
            timeout=UPLOAD_TIMEOUT,
        )
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.warning(f"Upload failed for {file_name}: {e.response.status_code}")
        return UploadResult(success=False, file_name=file_name, message=describe_error(e.response))
    except httpx.HTTPError as e:
        logger.warning(f"Upload failed for {file_name}: {e}")
        return UploadResult(success=False, file_name=file_name, message=str(e) or GENERIC_UPLOAD_ERROR)

    payload = response.json()
    document = UploadedDocument(
        id=payload["blobName"],
        raw_name=payload["blobName"],
        file_name=file_name,
        size=len(data),
        uploaded_on=datetime.now(timezone.utc).isoformat(),
        content_type=content_type,
    )
    return UploadResult(success=True, file_name=file_name, document=document)


def delete_document(backend_url: str, document_id: str, client: httpx.Client | None = None) -> bool:
    """Call DELETE /api/fileupload/{blobName}.

    Returns:
        True on success, False on any failure (including not found)
    """
    try:
        response = _send(client, "DELETE", f"{backend_url}/api/fileupload/{quote(document_id, safe='')}")
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning(f"Delete failed for {document_id}: {e}")
        return False
    return True


def send_chat(
    backend_url: str,
    message: str,
    document_ids: list[str] | None = None,
    client: httpx.Client | None = None,
) -> str:
    """Call POST /api/chat and return the answer text.

    Raises:
        httpx.HTTPError: If the request fails
    """
    response = _send(
        client,
        "POST",
        f"{backend_url}/api/chat",
        json={"message": message, "documentIds": document_ids or []},
        timeout=CHAT_TIMEOUT,
    )
    response.raise_for_status()

    try:
        payload = response.json()
    except ValueError:
        # Plain-text reply
        payload = response.text
    return normalize_chat_response(payload)


# --- Response parsing ---


def _try_parse_json(content: str) -> Any:
    try:
        return json.loads(content)
    except ValueError:
        return None


def _first_text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def extract_answer_text(answer: Any) -> str | None:
    """Pull readable text out of an ``answer`` field.

    The field is usually plain text but may hold a JSON-encoded completion
    object, so strings that parse as JSON objects are inspected as well.
    """
    if not answer:
        return None

    if isinstance(answer, str):
        trimmed = answer.strip()
        if not trimmed:
            return None
        parsed = _try_parse_json(trimmed)
        if isinstance(parsed, dict):
            return extract_answer_text(parsed) or trimmed
        return trimmed

    if not isinstance(answer, dict):
        return None

    content = answer.get("Content") or answer.get("content")
    if isinstance(content, list):
        for entry in content:
            if isinstance(entry, dict):
                text = _first_text(entry.get("Text")) or _first_text(entry.get("text"))
                if text:
                    return text

    choices = answer.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        message = choices[0].get("message")
        if isinstance(message, dict):
            text = _first_text(message.get("content"))
            if text:
                return text

    return _first_text(answer.get("answer")) or _first_text(answer.get("text"))


def normalize_chat_response(payload: Any) -> str:
    """Turn a /api/chat payload into the text shown in the transcript."""
    if isinstance(payload, str):
        return payload.strip() or EMPTY_RESPONSE

    if not isinstance(payload, dict):
        return RESPONSE_WITHOUT_TEXT

    answer_text = extract_answer_text(payload.get("answer"))
    if answer_text:
        return answer_text

    for key in ("message", "response", "question"):
        fallback = _first_text(payload.get(key))
        if fallback:
            return fallback
    return RESPONSE_WITHOUT_TEXT


def strip_tags(value: str) -> str:
    return _TAG_RE.sub("", value).strip()


def describe_error(response: httpx.Response | None) -> str:
    """Build a user-facing message from an error response."""
    if response is None:
        return GENERIC_UPLOAD_ERROR

    payload = _try_parse_json(response.text) if response.text else None
    if isinstance(payload, dict):
        for key in ("detail", "message"):
            message = _first_text(payload.get(key))
            if message:
                return message
    elif isinstance(payload, str) and payload.strip():
        return strip_tags(payload) or GENERIC_UPLOAD_ERROR
    elif payload is None and response.text:
        cleaned = strip_tags(response.text)
        if cleaned:
            return cleaned

    if response.status_code:
        label = response.reason_phrase or "Server error"
        return f"{label} ({response.status_code})"

    return GENERIC_UPLOAD_ERROR


# --- Display formatting ---


def readable_name(name: str) -> str:
    """Strip the random-id prefix from a blob name."""
    if "-" not in name:
        return name
    rest = name.split("-", 1)[1]
    return rest or name


def to_uploaded_document(item: dict[str, Any]) -> UploadedDocument:
    """Map one GET /api/fileupload entry to an UploadedDocument."""
    name = item["name"]
    return UploadedDocument(
        id=name,
        raw_name=name,
        file_name=readable_name(name),
        size=item.get("sizeBytes") or 0,
        uploaded_on=item.get("uploadedOn"),
        content_type=item.get("format"),
    )


def format_size(size_bytes: int | None) -> str:
    """Format a byte count as B/KB/MB/GB."""
    if not size_bytes or size_bytes <= 0:
        return "0 B"

    exponent = 0
    while exponent < len(SIZE_UNITS) - 1 and size_bytes >= 1024 ** (exponent + 1):
        exponent += 1

    size = size_bytes / 1024**exponent
    precision = 0 if exponent == 0 else 1
    return f"{size:.{precision}f} {SIZE_UNITS[exponent]}"


def get_extension(file_name: str | None) -> str:
    """Short upper-case extension badge, "FILE" when there is none."""
    if not file_name or "." not in file_name:
        return "FILE"
    return file_name.rsplit(".", 1)[1][:4].upper() or "FILE"


def describe_content_type(content_type: str | None) -> str:
    """One-line description of a stored document by content type."""
    default = "Stored securely and ready to power grounded chat."
    if not content_type:
        return default
    if "pdf" in content_type:
        return "Portable document indexed for semantic answers."
    if "word" in content_type or "doc" in content_type:
        return "Word document parsed into knowledge snippets."
    if any(marker in content_type for marker in ("excel", "sheet", "csv")):
        return "Tabular data normalized for fast lookups."
    return default


def format_document_meta(document: UploadedDocument) -> str:
    return f"{format_size(document.size)} · {document.content_type or 'Unknown type'}"
