"""Conversation data models."""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class DialogStep(str, Enum):
    """Steps of the weather dialog, in the order they run."""
    INITIALIZE = "initialize"
    ASK_CITY = "ask_city"
    ASK_FORECAST_TYPE = "ask_forecast_type"
    FINALIZE = "finalize"


@dataclass
class ConversationState:
    """Answers collected from the user so far."""
    city: Optional[str] = None
    forecast_type: Optional[str] = None


@dataclass
class DialogSession:
    """
    Everything the host persists for one user between turns.

    Attributes:
        state: Collected answers, None until the dialog first runs
        pending_step: The step whose prompt is awaiting an answer, None when idle
    """
    state: Optional[ConversationState] = None
    pending_step: Optional[DialogStep] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "has_state": self.state is not None,
            "city": self.state.city if self.state else None,
            "forecast_type": self.state.forecast_type if self.state else None,
            "pending_step": self.pending_step.value if self.pending_step else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DialogSession":
        state = None
        if data.get("has_state"):
            state = ConversationState(
                city=data.get("city"),
                forecast_type=data.get("forecast_type")
            )
        pending = data.get("pending_step")
        return cls(
            state=state,
            pending_step=DialogStep(pending) if pending else None
        )
