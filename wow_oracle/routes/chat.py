"""Oracle chat, fact-check and suggestion endpoints."""

from fastapi import APIRouter, HTTPException, Request

from wow_oracle.llm import LLMError
from wow_oracle.oracle import run_chat, suggest_questions, verify_message
from wow_oracle.prompts import PromptError

from .models import ChatBody, ChatReply, Era, VerifyBody

router = APIRouter()


@router.post("/chat", response_model=ChatReply)
async def chat(body: ChatBody, request: Request):
    """Answer a question for the selected era, with Wowhead links resolved."""
    if not body.message.strip():
        raise HTTPException(400, "Message is required")
    history = [m.model_dump() for m in body.history]
    try:
        return await run_chat(
            body.message, body.era, history,
            llm=request.app.state.llm,
            resolver=request.app.state.resolver,
        )
    except LLMError as e:
        raise HTTPException(502, f"Failed to get response from the Oracle: {e}")
    except PromptError as e:
        raise HTTPException(500, str(e))


@router.post("/verify")
async def verify(body: VerifyBody, request: Request):
    """Fact-check a previous answer."""
    if not body.message.strip():
        raise HTTPException(400, "Message content is required")
    try:
        verdict = await verify_message(body.message, body.era, request.app.state.llm)
    except LLMError as e:
        raise HTTPException(502, f"Failed to verify message: {e}")
    return {"verification": verdict}


@router.get("/suggestions")
async def suggestions(request: Request, era: Era = "Classic"):
    """Starter questions for an era. Always succeeds."""
    return {"suggestions": await suggest_questions(era, request.app.state.llm)}
