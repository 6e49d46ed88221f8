"""
Weather dialog for the Weather Dialog Bot.

This module implements the turn sequencer that collects a city and a forecast
type over several turns, queries the weather provider and replies with the
result. The sequencer is a plain transition function over a DialogSession
owned by the host: each call to `advance` runs steps until the dialog either
needs user input (Prompt) or finishes (Done).
"""

import logging
from typing import Callable, Dict, Optional, Union

from models.activity import IM_BACK, Activity, CardAction, Done, Prompt, TurnResult
from models.conversation import ConversationState, DialogSession, DialogStep
from models.weather import ForecastType
from services.reply_renderer import ReplyRenderer
from services.weather_client import WeatherClient
from config import MIN_ANSWER_LENGTH, STRICT_FORECAST_TYPE

logger = logging.getLogger(__name__)

StepOutcome = Union[DialogStep, Prompt, Done]


class WeatherDialog:
    """
    Four-step weather dialog: initialize, ask city, ask forecast type, finalize.

    Steps run in strict order. A step whose answer is already known is skipped
    without suspending, so a session seeded with a city goes straight to the
    forecast type question.
    """

    CITY_PROMPT = "Hello, what city do you want to get weather in?"
    FORECAST_TYPE_PROMPT = "Choose weather type:"

    CITY_TOO_SHORT = f"City names needs to be at least `{MIN_ANSWER_LENGTH}` characters long."
    FORECAST_TYPE_TOO_SHORT = f"Forecast type needs to be at least `{MIN_ANSWER_LENGTH}` characters long."
    FORECAST_TYPE_NOT_ALLOWED = "Forecast type needs to be either `Current` or `Forecast`."
    WRONG_CITY = "Wrong city name."

    ORDER = [
        DialogStep.INITIALIZE,
        DialogStep.ASK_CITY,
        DialogStep.ASK_FORECAST_TYPE,
        DialogStep.FINALIZE,
    ]

    def __init__(
        self,
        weather_client: WeatherClient,
        renderer: Optional[ReplyRenderer] = None,
        strict_forecast_type: bool = STRICT_FORECAST_TYPE
    ):
        """
        Initialize the dialog.

        Args:
            weather_client: Client used by the finalize step
            renderer: Reply renderer (defaults to the configured style)
            strict_forecast_type: Only accept the two offered forecast types
        """
        self.weather_client = weather_client
        self.renderer = renderer or ReplyRenderer()
        self.strict_forecast_type = strict_forecast_type

        self._steps: Dict[DialogStep, Callable[..., StepOutcome]] = {
            DialogStep.INITIALIZE: self._initialize,
            DialogStep.ASK_CITY: self._ask_city,
            DialogStep.ASK_FORECAST_TYPE: self._ask_forecast_type,
            DialogStep.FINALIZE: self._finalize,
        }

    def advance(
        self,
        session: DialogSession,
        user_input: Optional[str] = None,
        seed: Optional[ConversationState] = None
    ) -> TurnResult:
        """
        Run one user turn.

        Args:
            session: Host-persisted session; mutated in place
            user_input: The user's message, answering the pending prompt if any
            seed: Initial answers, used only when the dialog starts

        Returns:
            Prompt when waiting for the user, Done when the dialog has finished
        """
        answer = None

        if session.pending_step is None:
            step = DialogStep.INITIALIZE
        else:
            rejection = self.validate(session.pending_step, user_input)
            if rejection:
                logger.debug(f"Rejected answer for {session.pending_step.value}: {user_input!r}")
                return Prompt(
                    prompt=self._prompt_for(session.pending_step),
                    messages=[Activity(text=rejection)],
                    retry=True
                )
            answer = user_input.strip()
            step = self._next(session.pending_step)
            session.pending_step = None

        while True:
            outcome = self._steps[step](session, answer, seed)
            if isinstance(outcome, (Prompt, Done)):
                return outcome
            # An answer belongs to the step right after its prompt only
            answer = None
            step = outcome

    def validate(self, step: DialogStep, value: Optional[str]) -> Optional[str]:
        """
        Check an answer to the prompt issued by `step`.

        Returns:
            None when the answer is accepted, otherwise the message to show
        """
        value = (value or "").strip()

        if step == DialogStep.ASK_CITY:
            if len(value) < MIN_ANSWER_LENGTH:
                return self.CITY_TOO_SHORT
            return None

        if len(value) < MIN_ANSWER_LENGTH:
            return self.FORECAST_TYPE_TOO_SHORT
        if self.strict_forecast_type and value.lower() not in (t.value.lower() for t in ForecastType):
            return self.FORECAST_TYPE_NOT_ALLOWED
        return None

    def _initialize(self, session: DialogSession, answer: Optional[str], seed: Optional[ConversationState]) -> StepOutcome:
        if session.state is None:
            session.state = ConversationState()
            logger.info("Created new weather conversation state")

        # Seed values never overwrite answers already collected; invalid ones are ignored
        if seed is not None:
            if not session.state.city and self._acceptable_seed(DialogStep.ASK_CITY, seed.city):
                session.state.city = capitalize(seed.city)
            if not session.state.forecast_type and self._acceptable_seed(DialogStep.ASK_FORECAST_TYPE, seed.forecast_type):
                session.state.forecast_type = capitalize(seed.forecast_type)

        return DialogStep.ASK_CITY

    def _ask_city(self, session: DialogSession, answer: Optional[str], seed: Optional[ConversationState]) -> StepOutcome:
        if not session.state.city:
            return self._suspend(session, DialogStep.ASK_CITY)
        return DialogStep.ASK_FORECAST_TYPE

    def _ask_forecast_type(self, session: DialogSession, answer: Optional[str], seed: Optional[ConversationState]) -> StepOutcome:
        state = session.state
        if not state.city and answer:
            state.city = capitalize(answer)
            logger.info(f"Captured city: {state.city}")

        if not state.forecast_type:
            return self._suspend(session, DialogStep.ASK_FORECAST_TYPE)
        return DialogStep.FINALIZE

    def _finalize(self, session: DialogSession, answer: Optional[str], seed: Optional[ConversationState]) -> StepOutcome:
        state = session.state
        if not state.forecast_type and answer:
            state.forecast_type = capitalize(answer)
            logger.info(f"Captured forecast type: {state.forecast_type}")

        forecast_type = ForecastType.resolve(state.forecast_type)
        try:
            result = self.weather_client.fetch(state.city, forecast_type)

            if result.ok:
                messages = [self.renderer.render(result)]
                logger.info(f"Sent {forecast_type.value.lower()} weather for {state.city}")
            else:
                messages = [Activity(text=self.WRONG_CITY)]
                logger.warning(
                    f"Weather lookup failed for {state.city}: {result.error.code}",
                    extra={"error_code": result.error.code, "error_details": result.error.details}
                )
        finally:
            # Success or not, the dialog ends with empty state
            session.state = ConversationState()
            session.pending_step = None

        return Done(messages=messages)

    def _acceptable_seed(self, step: DialogStep, value: Optional[str]) -> bool:
        if value is None:
            return False
        rejection = self.validate(step, value)
        if rejection:
            logger.info(f"Ignoring seed value for {step.value}: {value!r}")
            return False
        return True

    def _suspend(self, session: DialogSession, step: DialogStep) -> Prompt:
        session.pending_step = step
        logger.info(f"Prompting for {step.value}")
        return Prompt(prompt=self._prompt_for(step))

    def _prompt_for(self, step: DialogStep) -> Activity:
        if step == DialogStep.ASK_CITY:
            return Activity(text=self.CITY_PROMPT)
        return Activity(
            text=self.FORECAST_TYPE_PROMPT,
            suggested_actions=[
                CardAction(type=IM_BACK, title="Current", value="current"),
                CardAction(type=IM_BACK, title="Forecast", value="forecast"),
            ]
        )

    def _next(self, step: DialogStep) -> DialogStep:
        return self.ORDER[self.ORDER.index(step) + 1]


def capitalize(value: str) -> str:
    """Trim and upper-case the first character, leaving the rest untouched."""
    value = value.strip()
    return value[:1].upper() + value[1:]
