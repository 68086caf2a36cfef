"""Chatbot endpoints: liveness, registration dialogue and LLM echo."""
import logging
from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import PlainTextResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from regbot.orchestrator import RegistrationOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter()


class MessageRequest(BaseModel):
    """Body of POST /message."""
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[Any] = Field(None, alias="userId")
    message: Optional[Any] = None


class EchoRequest(BaseModel):
    """Body of POST /llm-echo."""
    prompt: Optional[Any] = None


def get_orchestrator(request: Request) -> RegistrationOrchestrator:
    return request.app.state.orchestrator


@router.get("/", response_class=PlainTextResponse)
async def index():
    return "Chatbot API is running."


@router.post("/message")
async def submit_message(request: Request, body: Optional[MessageRequest] = None):
    """
    Apply one user message to the registration dialogue.

    Returns the next question, or the closing message with the final record
    once every field is collected.
    """
    body = body or MessageRequest()
    if not body.user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="userId is required")

    response = await get_orchestrator(request).submit_message(str(body.user_id), body.message)
    return response.to_dict()


@router.post("/llm-echo")
async def llm_echo(request: Request, body: Optional[EchoRequest] = None):
    """Send a prompt straight to the language model."""
    body = body or EchoRequest()
    if not body.prompt or not isinstance(body.prompt, str):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="prompt is required")

    reply = await get_orchestrator(request).echo_prompt(body.prompt)
    return {"reply": reply}


@router.options("/{path:path}", include_in_schema=False)
async def options_catch_all(path: str):
    """Answer bare OPTIONS requests; CORS preflights are handled by the middleware."""
    return Response(status_code=status.HTTP_204_NO_CONTENT)
