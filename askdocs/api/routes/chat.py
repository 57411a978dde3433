"""Chat endpoint - POST /api/chat."""

import logging
from typing import Annotated

from fastapi import APIRouter, Body, Depends

from askdocs.errors import InputValidationError
from askdocs.gateways.answer import AnswerGateway
from askdocs.gateways.factory import get_answer_gateway, get_search_gateway
from askdocs.gateways.search import SearchGateway
from askdocs.models.chat import ChatRequest, ChatResponse

router = APIRouter(prefix="/api/chat", tags=["chat"])
logger = logging.getLogger(__name__)

CONTEXT_SEPARATOR = "\n\n"


def require_question(request: Annotated[ChatRequest | None, Body()] = None) -> ChatRequest:
    """Reject missing or blank questions before any gateway is built."""
    if request is None or request.message is None or not request.message.strip():
        raise InputValidationError("Question is required.")
    return request


@router.post("", response_model=ChatResponse)
async def chat(
    request: Annotated[ChatRequest, Depends(require_question)],
    search: Annotated[SearchGateway, Depends(get_search_gateway)],
    answer: Annotated[AnswerGateway, Depends(get_answer_gateway)],
) -> ChatResponse:
    """Answer a question from retrieved document chunks.

    Retrieval runs first, then generation; the chunks are joined into one
    context block for the answer gateway and returned unchanged.
    """
    question = request.message or ""

    if request.document_ids:
        # Selection is not forwarded to the search index yet.
        logger.info(
            f"[POST /api/chat] {len(request.document_ids)} documents selected; "
            "retrieval is not scoped to the selection"
        )

    chunks = await search.search(question)
    context = CONTEXT_SEPARATOR.join(chunks)
    answer_text = await answer.ask(context, question)

    logger.info(
        f"[POST /api/chat] question_length={len(question)} chunks={len(chunks)} "
        f"answer_length={len(answer_text)}"
    )

    return ChatResponse(question=question, answer=answer_text, context=chunks)
