"""Outgoing activity models: messages, cards and turn results."""
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Union

# Card action types
OPEN_URL = "openUrl"
IM_BACK = "imBack"


@dataclass
class CardAction:
    """A button or quick reply."""
    type: str
    title: str
    value: str


@dataclass
class CardImage:
    url: str


@dataclass
class ThumbnailCard:
    """Small image-bearing card with a title, subtitle, text and buttons."""
    title: str
    subtitle: str
    text: str
    images: List[CardImage] = field(default_factory=list)
    buttons: List[CardAction] = field(default_factory=list)
    content_type: str = "thumbnail"


@dataclass
class ReceiptItem:
    title: str
    price: str
    image: Optional[CardImage] = None


@dataclass
class ReceiptCard:
    """Summary card listing several items in one attachment."""
    title: str
    items: List[ReceiptItem] = field(default_factory=list)
    buttons: List[CardAction] = field(default_factory=list)
    content_type: str = "receipt"


Attachment = Union[ThumbnailCard, ReceiptCard]


@dataclass
class Activity:
    """A single message handed to the host for delivery."""
    text: Optional[str] = None
    attachments: List[Attachment] = field(default_factory=list)
    suggested_actions: List[CardAction] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Prompt:
    """
    Turn result: the dialog is suspended awaiting user input.

    Attributes:
        prompt: The question to show the user
        messages: Messages emitted earlier in the turn (e.g. a validation error)
        retry: True when the previous answer was rejected and the prompt is re-issued
    """
    prompt: Activity
    messages: List[Activity] = field(default_factory=list)
    retry: bool = False

    @property
    def done(self) -> bool:
        return False

    def outgoing(self) -> List[Activity]:
        return self.messages + [self.prompt]


@dataclass
class Done:
    """Turn result: the dialog finished and the session is idle again."""
    messages: List[Activity] = field(default_factory=list)

    @property
    def done(self) -> bool:
        return True

    @property
    def retry(self) -> bool:
        return False

    def outgoing(self) -> List[Activity]:
        return list(self.messages)


TurnResult = Union[Prompt, Done]
