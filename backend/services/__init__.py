"""Services for the Weather Dialog Bot."""
from .weather_client import WeatherClient, WeatherClientError
from .reply_renderer import ReplyRenderer
from .weather_dialog import WeatherDialog
from .session_store import SessionStore, SessionLocks, InMemorySessionStore, SupabaseSessionStore, create_session_store

__all__ = ['WeatherClient', 'WeatherClientError', 'ReplyRenderer', 'WeatherDialog', 'SessionStore', 'InMemorySessionStore', 'SupabaseSessionStore', 'SessionLocks', 'create_session_store']
