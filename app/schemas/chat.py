"""
Schemas for assistant and listing requests
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    """
    Assistant message. The session id is optional; the server creates one
    for a new conversation.
    """
    model_config = ConfigDict(populate_by_name=True)

    message: str = ""
    session_id: Optional[str] = Field(default=None, alias="sessionId")


class SessionClearRequest(BaseModel):
    """
    Session Clear Request only requires the session id, if any.
    """
    model_config = ConfigDict(populate_by_name=True)

    session_id: Optional[str] = Field(default=None, alias="sessionId")


class ChatResponse(BaseModel):
    """
    Assistant reply as rendered by the frontend.
    """
    model_config = ConfigDict(populate_by_name=True)

    reply: str
    search_url: Optional[str] = Field(default=None, alias="searchUrl")
    suggestions: List[str] = Field(default_factory=list)
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    preferences: Optional[dict] = None

