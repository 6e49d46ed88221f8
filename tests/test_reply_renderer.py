"""Unit tests for ReplyRenderer."""
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import pytest
from datetime import datetime, timezone
from models.activity import ReceiptCard, ThumbnailCard
from models.weather import CurrentConditions, ForecastPoint, ForecastType, ProviderError, WeatherQueryResult
from services.reply_renderer import ReplyRenderer


@pytest.fixture
def london():
    return WeatherQueryResult.success_current("London", CurrentConditions(15, 80, "04d"))


@pytest.fixture
def paris_forecast():
    temps = [5, 0, -3, 7, 9]
    points = [
        ForecastPoint(
            temperature_celsius=temp,
            humidity_percent=70 + i,
            icon_id=f"0{i + 1}d",
            timestamp=datetime(2026, 10, 18, 3 * i, 0, tzinfo=timezone.utc)
        )
        for i, temp in enumerate(temps)
    ]
    return WeatherQueryResult.success_forecast("Paris", points)


class TestReplyRenderer:
    """Test suite for ReplyRenderer."""

    def test_current_text(self, london):
        """Test plain text rendering of current conditions."""
        activity = ReplyRenderer(style="text").render(london)

        assert activity.text == "temperature 15 °C\nhumidity 80 %"
        assert activity.attachments == []

    def test_current_card(self, london):
        """Test the thumbnail card for current conditions."""
        now = datetime(2026, 10, 18, 14, 5)
        activity = ReplyRenderer(style="cards").render(london, now=now)

        assert len(activity.attachments) == 1
        card = activity.attachments[0]
        assert isinstance(card, ThumbnailCard)
        assert card.title == "London:"
        assert card.subtitle == "14:05"
        assert card.text == "temperature 15 °C\nhumidity 80 %"
        assert card.images[0].url == "http://openweathermap.org/img/w/04d.png"
        assert card.buttons[0].type == "openUrl"
        assert card.buttons[0].title == "More information"
        assert card.buttons[0].value == "https://openweathermap.org/find?q=London"

    def test_receipt_style_uses_card_for_current(self, london):
        """Test that receipt style still shows current conditions as a single card."""
        activity = ReplyRenderer(style="receipt").render(london)

        assert isinstance(activity.attachments[0], ThumbnailCard)

    def test_forecast_is_capped_at_three_cards(self, paris_forecast):
        """Test that only the first 3 of 5 points are rendered."""
        activity = ReplyRenderer(style="cards").render(paris_forecast)

        assert len(activity.attachments) == 3
        assert [c.subtitle for c in activity.attachments] == ["00:00", "03:00", "06:00"]
        assert activity.attachments[0].title == "Paris 2026-10-18:"
        assert activity.attachments[2].images[0].url == "http://openweathermap.org/img/w/03d.png"

    def test_forecast_temperatures_are_signed(self, paris_forecast):
        """Test that temperatures above zero get a plus sign and others do not."""
        cards = ReplyRenderer(style="cards").render(paris_forecast).attachments

        assert cards[0].text == "temperature +5 °C\nhumidity 70 %"
        assert cards[1].text == "temperature 0 °C\nhumidity 71 %"
        assert cards[2].text == "temperature -3 °C\nhumidity 72 %"

    def test_forecast_text(self, paris_forecast):
        """Test plain text rendering of a forecast, one line per point."""
        text = ReplyRenderer(style="text").render(paris_forecast).text

        lines = text.split("\n")
        assert len(lines) == 3
        assert lines[0] == "2026-10-18 00:00: temperature +5 °C, humidity 70 %"

    def test_forecast_receipt(self, paris_forecast):
        """Test the receipt card summarizing the forecast."""
        activity = ReplyRenderer(style="receipt").render(paris_forecast)

        assert len(activity.attachments) == 1
        receipt = activity.attachments[0]
        assert isinstance(receipt, ReceiptCard)
        assert receipt.title == "Weather forecast in Paris:"
        assert [item.price for item in receipt.items] == ["+5", "0", "-3"]
        assert receipt.items[1].title == "03:00"
        assert receipt.buttons[0].value == "https://openweathermap.org/find?q=Paris"

    def test_short_forecast_renders_every_point(self):
        """Test that fewer than 3 points are all rendered."""
        result = WeatherQueryResult.success_forecast("Lviv", [
            ForecastPoint(1, 50, "01d", datetime(2026, 10, 18, 9, 0))
        ])

        assert len(ReplyRenderer(style="cards").render(result).attachments) == 1

    def test_city_is_url_encoded_in_link(self):
        """Test that the more-information link escapes the city name."""
        renderer = ReplyRenderer()

        assert renderer.more_information("New York").value == "https://openweathermap.org/find?q=New%20York"

    def test_render_failure_raises(self):
        """Test that failures must be handled before rendering."""
        failure = WeatherQueryResult.failure(
            "Atlantis", ForecastType.CURRENT, ProviderError(code="HTTP_ERROR", message="404")
        )

        with pytest.raises(ValueError, match="failed weather result"):
            ReplyRenderer().render(failure)

    def test_unknown_style_raises(self):
        with pytest.raises(ValueError, match="Unknown reply style"):
            ReplyRenderer(style="html")

    def test_activity_serializes_to_dict(self, london):
        """Test the shape handed to the host for delivery."""
        data = ReplyRenderer(style="cards").render(london).to_dict()

        assert data["text"] is None
        assert data["attachments"][0]["content_type"] == "thumbnail"
        assert data["attachments"][0]["buttons"][0]["value"].endswith("London")
