"""Main entry point for the Weather Dialog Bot API."""
import logging
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from config import PORT, CORS_ORIGINS, LOG_FORMAT, LOG_LEVEL
from logger import setup_logging
from models.api import MessageRequest, MessageResponse
from models.conversation import ConversationState
from services.weather_client import WeatherClient
from services.reply_renderer import ReplyRenderer
from services.weather_dialog import WeatherDialog
from services.session_store import SessionLocks, SessionStore, create_session_store

if LOG_FORMAT == "json":
    setup_logging(LOG_LEVEL)

# Initialize logging
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Weather Dialog Bot",
    description="Chat bot dialog that asks for a city and forecast type and replies with the weather",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize services (will be done on startup)
weather_dialog: WeatherDialog = None
session_store: SessionStore = None
session_locks = SessionLocks()


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup."""
    global weather_dialog, session_store

    logger.info("Initializing Weather Dialog Bot services...")

    try:
        weather_client = WeatherClient()
        logger.info("Initialized WeatherClient")

        weather_dialog = WeatherDialog(weather_client, ReplyRenderer())
        logger.info("Initialized WeatherDialog")

        session_store = create_session_store()
        logger.info(f"Initialized {type(session_store).__name__}")

        logger.info("All services initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}", exc_info=True)
        raise


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "Weather Dialog Bot API"}


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "service": "weather-dialog-bot",
        "version": "1.0.0"
    }


@app.post("/messages", response_model=MessageResponse)
def messages_endpoint(request: MessageRequest) -> MessageResponse:
    """
    Run one turn of the weather dialog.

    Loads the session, advances the dialog with the user's text and persists
    the session again, holding the session's lock throughout so turns for
    one session never interleave. A request without a session_id starts a
    new session.

    Args:
        request: MessageRequest with the user's text and optional seed values

    Returns:
        MessageResponse with the bot's messages and whether it awaits input

    Raises:
        HTTPException: For unexpected failures
    """
    session_id = request.session_id or SessionStore.generate_session_id()

    try:
        seed = None
        if request.city or request.forecast_type:
            seed = ConversationState(city=request.city, forecast_type=request.forecast_type)

        with session_locks.hold(session_id):
            session = session_store.load(session_id)
            result = weather_dialog.advance(session, request.text, seed)
            session_store.save(session_id, session)

        status = "complete" if result.done else "awaiting_input"
        logger.info(f"Turn processed: status={status}", extra={"session_id": session_id})

        return MessageResponse(
            session_id=session_id,
            status=status,
            retry=result.retry,
            messages=[activity.to_dict() for activity in result.outgoing()]
        )

    except Exception as e:
        logger.error(f"Unexpected error processing turn: {e}", exc_info=True, extra={"session_id": session_id})
        raise HTTPException(
            status_code=500,
            detail=f"Internal server error: {str(e)}"
        )


@app.delete("/sessions/{session_id}")
def delete_session(session_id: str):
    """Drop a stored session so the next message starts over."""
    with session_locks.hold(session_id):
        deleted = session_store.delete(session_id)
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    logger.info("Session deleted", extra={"session_id": session_id})
    return {"status": "deleted", "session_id": session_id}


if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting Weather Dialog Bot API on port {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
