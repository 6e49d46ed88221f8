"""Reply renderer turning weather results into messages and cards."""
import logging
from datetime import datetime
from typing import List, Optional
from urllib.parse import quote

from models.activity import (
    OPEN_URL,
    Activity,
    CardAction,
    CardImage,
    ReceiptCard,
    ReceiptItem,
    ThumbnailCard,
)
from models.weather import CurrentConditions, ForecastPoint, ForecastType, WeatherQueryResult
from config import FORECAST_CARD_LIMIT, REPLY_STYLE, WEATHER_ICON_URL, WEATHER_INFO_URL

logger = logging.getLogger(__name__)


class ReplyRenderer:
    """
    Formats a WeatherQueryResult for delivery.

    Rendering is pure: it only builds Activity objects and never touches
    conversation state. Forecasts are capped at FORECAST_CARD_LIMIT points.
    """

    STYLE_CARDS = "cards"
    STYLE_TEXT = "text"
    STYLE_RECEIPT = "receipt"
    STYLES = (STYLE_CARDS, STYLE_TEXT, STYLE_RECEIPT)

    DATE_FORMAT = "%Y-%m-%d"
    TIME_FORMAT = "%H:%M"

    def __init__(
        self,
        style: str = REPLY_STYLE,
        icon_url: str = WEATHER_ICON_URL,
        info_url: str = WEATHER_INFO_URL,
        max_points: int = FORECAST_CARD_LIMIT
    ):
        if style not in self.STYLES:
            raise ValueError(f"Unknown reply style '{style}', expected one of {', '.join(self.STYLES)}")

        self.style = style
        self.icon_url = icon_url
        self.info_url = info_url
        self.max_points = max_points

    def render(self, result: WeatherQueryResult, now: Optional[datetime] = None) -> Activity:
        """
        Render a successful result in the configured style.

        Args:
            result: Successful WeatherQueryResult
            now: Time shown on the current-conditions card (defaults to now)

        Returns:
            A single Activity holding text or card attachments
        """
        if not result.ok:
            raise ValueError("Cannot render a failed weather result")

        if result.forecast_type == ForecastType.CURRENT:
            if self.style == self.STYLE_TEXT:
                return Activity(text=self.format_conditions(result.current))
            return Activity(attachments=[self.current_card(result.city, result.current, now)])

        if self.style == self.STYLE_TEXT:
            return Activity(text=self.forecast_text(result.forecast))
        if self.style == self.STYLE_RECEIPT:
            return Activity(attachments=[self.forecast_receipt(result.city, result.forecast)])
        return Activity(attachments=self.forecast_cards(result.city, result.forecast))

    @staticmethod
    def format_conditions(conditions: CurrentConditions, signed: bool = False) -> str:
        """Format as "temperature N °C" / "humidity N %" lines."""
        temp = conditions.temperature_celsius
        temp_text = f"+{temp}" if signed and temp > 0 else str(temp)
        return f"temperature {temp_text} °C\nhumidity {conditions.humidity_percent} %"

    def forecast_text(self, points: List[ForecastPoint]) -> str:
        lines = []
        for point in points[:self.max_points]:
            when = point.timestamp.strftime(f"{self.DATE_FORMAT} {self.TIME_FORMAT}")
            conditions = self.format_conditions(point, signed=True).replace("\n", ", ")
            lines.append(f"{when}: {conditions}")
        return "\n".join(lines)

    def current_card(
        self,
        city: str,
        conditions: CurrentConditions,
        now: Optional[datetime] = None
    ) -> ThumbnailCard:
        now = now or datetime.now()
        return ThumbnailCard(
            title=f"{city}:",
            subtitle=now.strftime(self.TIME_FORMAT),
            text=self.format_conditions(conditions),
            images=[CardImage(url=self.icon(conditions.icon_id))],
            buttons=[self.more_information(city)]
        )

    def forecast_cards(self, city: str, points: List[ForecastPoint]) -> List[ThumbnailCard]:
        """One card per forecast point; points past max_points are dropped."""
        cards = [
            ThumbnailCard(
                title=f"{city} {point.timestamp.strftime(self.DATE_FORMAT)}:",
                subtitle=point.timestamp.strftime(self.TIME_FORMAT),
                text=self.format_conditions(point, signed=True),
                images=[CardImage(url=self.icon(point.icon_id))],
                buttons=[self.more_information(city)]
            )
            for point in points[:self.max_points]
        ]

        if len(points) > self.max_points:
            logger.debug(f"Trimmed forecast for {city} from {len(points)} to {self.max_points} points")

        return cards

    def forecast_receipt(self, city: str, points: List[ForecastPoint]) -> ReceiptCard:
        """Summarize the first forecast points in one receipt-style card."""
        items = []
        for point in points[:self.max_points]:
            temp = point.temperature_celsius
            items.append(ReceiptItem(
                title=point.timestamp.strftime(self.TIME_FORMAT),
                price=f"+{temp}" if temp > 0 else str(temp),
                image=CardImage(url=self.icon(point.icon_id))
            ))

        return ReceiptCard(
            title=f"Weather forecast in {city}:",
            items=items,
            buttons=[self.more_information(city)]
        )

    def icon(self, icon_id: str) -> str:
        return self.icon_url.format(icon=icon_id)

    def more_information(self, city: str) -> CardAction:
        return CardAction(
            type=OPEN_URL,
            title="More information",
            value=self.info_url + quote(city)
        )
