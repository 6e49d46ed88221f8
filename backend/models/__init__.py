"""Data models for the Weather Dialog Bot."""
from .conversation import ConversationState, DialogSession, DialogStep
from .weather import CurrentConditions, ForecastPoint, ForecastType, ProviderError, WeatherQueryResult
from .activity import Activity, CardAction, CardImage, ThumbnailCard, ReceiptCard, ReceiptItem, Prompt, Done
from .api import MessageRequest, MessageResponse

__all__ = [
    "ConversationState",
    "DialogSession",
    "DialogStep",
    "CurrentConditions",
    "ForecastPoint",
    "ForecastType",
    "ProviderError",
    "WeatherQueryResult",
    "Activity",
    "CardAction",
    "CardImage",
    "ThumbnailCard",
    "ReceiptCard",
    "ReceiptItem",
    "Prompt",
    "Done",
    "MessageRequest",
    "MessageResponse",
]
