"""Session stores persisting dialog sessions between turns."""
import logging
import threading
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from typing import Dict, Iterator, List, Optional
from supabase import create_client, Client

from models.conversation import DialogSession
from config import SESSION_STORE, SUPABASE_URL, SUPABASE_KEY

logger = logging.getLogger(__name__)


class SessionStore(ABC):
    """Interface for per-user dialog session storage."""

    @abstractmethod
    def load(self, session_id: str) -> DialogSession:
        """Return the stored session, or a fresh one if none exists."""
        raise NotImplementedError

    @abstractmethod
    def save(self, session_id: str, session: DialogSession) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, session_id: str) -> bool:
        """Drop a session; returns whether one existed."""
        raise NotImplementedError

    @staticmethod
    def generate_session_id() -> str:
        """
        Generate a unique session ID.

        Returns:
            Unique session ID string
        """
        return f"conv_{uuid.uuid4().hex[:12]}"


class InMemorySessionStore(SessionStore):
    """Keeps sessions in a dict; suitable for a single process."""

    def __init__(self):
        self._sessions: Dict[str, dict] = {}
        logger.info("InMemorySessionStore initialized")

    def load(self, session_id: str) -> DialogSession:
        data = self._sessions.get(session_id)
        if data is None:
            logger.debug(f"No stored session {session_id}, starting fresh")
            return DialogSession()
        return DialogSession.from_dict(data)

    def save(self, session_id: str, session: DialogSession) -> None:
        # Persisted as a plain dict; every load builds a new DialogSession
        self._sessions[session_id] = session.to_dict()
        logger.debug(f"Saved session {session_id}")

    def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None


class SupabaseSessionStore(SessionStore):
    """Manages session storage and retrieval using Supabase PostgreSQL."""

    def __init__(
        self,
        supabase_url: Optional[str] = SUPABASE_URL,
        supabase_key: Optional[str] = SUPABASE_KEY,
        table_name: str = "weather_sessions"
    ):
        """
        Initialize the session store with a Supabase client.

        Args:
            supabase_url: Supabase project URL
            supabase_key: Supabase API key
            table_name: Table holding one row per session

        Raises:
            ValueError: If Supabase credentials are missing
        """
        if not supabase_url or not supabase_key:
            raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set in environment variables")

        self.table_name = table_name
        self.client: Client = create_client(supabase_url, supabase_key)
        logger.info(f"SupabaseSessionStore initialized with table: {table_name}")

    def load(self, session_id: str) -> DialogSession:
        try:
            result = self.client.table(self.table_name).select("*").eq("session_id", session_id).execute()
        except Exception as e:
            logger.error(f"Error retrieving session {session_id}: {e}")
            raise

        if not result.data:
            logger.debug(f"Session {session_id} not found, starting fresh")
            return DialogSession()

        return DialogSession.from_dict(result.data[0])

    def save(self, session_id: str, session: DialogSession) -> None:
        row = session.to_dict()
        row["session_id"] = session_id
        row["updated_at"] = datetime.now().isoformat()

        try:
            self.client.table(self.table_name).upsert(row, on_conflict="session_id").execute()
            logger.debug(f"Saved session {session_id}")
        except Exception as e:
            logger.error(f"Error saving session {session_id}: {e}")
            raise

    def delete(self, session_id: str) -> bool:
        try:
            result = self.client.table(self.table_name).delete().eq("session_id", session_id).execute()
        except Exception as e:
            logger.error(f"Error deleting session {session_id}: {e}")
            raise
        return bool(result.data)


class SessionLocks:
    """
    Per-session locks so only one turn runs at a time for a session.

    A session's lock exists only while some turn holds or waits for it, so
    finished sessions leave nothing behind. Locks are process-local.
    """

    def __init__(self):
        self._guard = threading.Lock()
        # session_id -> [lock, number of turns holding or waiting]
        self._locks: Dict[str, List] = {}

    @contextmanager
    def hold(self, session_id: str) -> Iterator[None]:
        with self._guard:
            entry = self._locks.setdefault(session_id, [threading.Lock(), 0])
            entry[1] += 1

        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[session_id]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


def create_session_store(backend: str = SESSION_STORE) -> SessionStore:
    """Build the session store named by SESSION_STORE."""
    if backend == "memory":
        return InMemorySessionStore()
    if backend == "supabase":
        return SupabaseSessionStore()
    raise ValueError(f"Unknown session store '{backend}', expected 'memory' or 'supabase'")
