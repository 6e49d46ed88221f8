"""Configuration management for the Weather Dialog Bot."""
import os
import logging
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# API Keys
OPENWEATHER_API_KEY = os.getenv("OPENWEATHER_API_KEY")
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")

# Server Configuration
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "text")

# CORS Configuration
CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,http://localhost:3001"
).split(",")

# Weather Provider Configuration
WEATHER_API_BASE_URL = os.getenv("WEATHER_API_BASE_URL", "https://api.openweathermap.org/data/2.5")
WEATHER_API_TIMEOUT = float(os.getenv("WEATHER_API_TIMEOUT", "10.0"))  # seconds
WEATHER_ICON_URL = os.getenv("WEATHER_ICON_URL", "http://openweathermap.org/img/w/{icon}.png")
WEATHER_INFO_URL = os.getenv("WEATHER_INFO_URL", "https://openweathermap.org/find?q=")

# Dialog Configuration
MIN_ANSWER_LENGTH = 3
FORECAST_CARD_LIMIT = 3
REPLY_STYLE = os.getenv("REPLY_STYLE", "cards")  # cards, text or receipt
STRICT_FORECAST_TYPE = os.getenv("STRICT_FORECAST_TYPE", "false").lower() in ("1", "true", "yes")

# Session Storage
SESSION_STORE = os.getenv("SESSION_STORE", "memory")  # memory or supabase

# Logging Configuration
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
