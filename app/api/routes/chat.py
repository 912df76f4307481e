"""
Assistant API routes.

This module defines the HTTP endpoints of the PrimeNest conversational
assistant. It acts as a thin controller layer that validates input
schemas and delegates business logic to the ChatService kept on the
application state.
"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.api.auth import verify_token
from app.schemas.chat import ChatRequest, ChatResponse, SessionClearRequest


# ---------------------------------------------------------
# Router initialization for assistant endpoints
# ---------------------------------------------------------

router = APIRouter(dependencies=[Depends(verify_token)])


@router.post("/chat", response_model=ChatResponse)
def chat(
    request: ChatRequest,
    req: Request
    ):
    """
    Handle a message sent to the assistant.

    Args:
        request (ChatRequest): Validated body with the message and an
            optional session id.
        req (Request): FastAPI request object used to reach the ChatService.

    Returns:
        dict: reply, searchUrl, suggestions, preferences and sessionId.
            Pipeline failures still answer 200 with a fallback reply;
            an empty message answers 400.
    """
    if not request.message or not request.message.strip():
        return JSONResponse(status_code=400, content={"message": "Message is required"})

    return req.app.state.chat_service.handle_message(request.message, request.session_id)


@router.post("/session/clear", response_model=ChatResponse)
def clear_session(
    request: SessionClearRequest,
    req: Request
    ):
    """
    Forget a conversation. Clearing an unknown session is not an error.
    """
    return req.app.state.chat_service.clear_session(request.session_id)


@router.get("/session/{session_id}")
def get_session(session_id: str, req: Request):
    """
    Diagnostics snapshot of a session: timestamps, turn count and
    preferences. 404 when the session is unknown or has expired.
    """
    info = req.app.state.chat_service.describe_session(session_id)
    if info is None:
        return JSONResponse(status_code=404, content={"error": "Session not found"})
    return info
