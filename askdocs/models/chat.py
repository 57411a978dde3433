"""Chat request/response contract."""

from pydantic import Field

from askdocs.models.common import CamelModel


class ChatRequest(CamelModel):
    """Request body for POST /api/chat.

    ``message`` is optional at the schema level so a missing question is
    reported as a 400 by the route rather than a 422 by FastAPI.
    """

    message: str | None = None
    document_ids: list[str] = Field(default_factory=list)


class ChatResponse(CamelModel):
    """Response for POST /api/chat."""

    question: str
    answer: str
    context: list[str] = Field(default_factory=list, description="Chunks used as context")
