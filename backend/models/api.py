"""API request/response models."""
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field


class MessageRequest(BaseModel):
    """One user turn sent to the bot."""
    session_id: Optional[str] = Field(default=None, description="Existing session ID; a new one is created if omitted")
    text: Optional[str] = Field(default=None, description="The user's message for this turn")
    city: Optional[str] = Field(default=None, description="Seed value for the city question")
    forecast_type: Optional[str] = Field(default=None, description="Seed value for the forecast type question")


class MessageResponse(BaseModel):
    """Messages produced by the bot for one turn."""
    session_id: str
    status: Literal["awaiting_input", "complete"]
    retry: bool = Field(default=False, description="True when the previous answer was rejected and the prompt is repeated")
    messages: List[Dict[str, Any]] = Field(default_factory=list)
