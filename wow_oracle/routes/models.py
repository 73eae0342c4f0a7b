"""Pydantic request/response models for API endpoints."""

from typing import Literal

from pydantic import BaseModel, Field

Era = Literal["Classic", "Vanilla", "Anniversary", "TBC", "WotLK", "Retail"]


class HistoryMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ChatBody(BaseModel):
    message: str
    era: Era = "Classic"
    history: list[HistoryMessage] = Field(default_factory=list)


class ChatReply(BaseModel):
    message: str
    followups: list[str] = Field(default_factory=list)


class VerifyBody(BaseModel):
    message: str
    era: Era = "Classic"


class RewriteBody(BaseModel):
    text: str
    era: Era = "Classic"
