"""Unit tests for session stores."""
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import pytest
import threading
import time
from unittest.mock import Mock, patch
from models.conversation import ConversationState, DialogSession, DialogStep
from services.session_store import (
    InMemorySessionStore,
    SessionLocks,
    SessionStore,
    SupabaseSessionStore,
    create_session_store,
)


class TestDialogSessionSerialization:
    """Test suite for DialogSession dict conversion."""

    def test_fresh_session_has_no_state(self):
        session = DialogSession.from_dict(DialogSession().to_dict())

        assert session.state is None
        assert session.pending_step is None

    def test_pending_session_keeps_answers(self):
        original = DialogSession(
            state=ConversationState(city="Rivne"),
            pending_step=DialogStep.ASK_FORECAST_TYPE
        )

        restored = DialogSession.from_dict(original.to_dict())

        assert restored == original

    def test_empty_state_is_not_none(self):
        """Test that a reset state survives storage as empty, not missing."""
        restored = DialogSession.from_dict(DialogSession(state=ConversationState()).to_dict())

        assert restored.state == ConversationState()


class TestInMemorySessionStore:
    """Test suite for InMemorySessionStore."""

    @pytest.fixture
    def store(self):
        return InMemorySessionStore()

    def test_load_unknown_session_starts_fresh(self, store):
        assert store.load("conv_missing") == DialogSession()

    def test_save_and_load(self, store):
        session = DialogSession(state=ConversationState(city="Lviv"), pending_step=DialogStep.ASK_FORECAST_TYPE)

        store.save("conv_1", session)
        loaded = store.load("conv_1")

        assert loaded == session
        assert loaded is not session

    def test_saved_copy_is_isolated(self, store):
        """Test that mutating a session after saving does not change the stored one."""
        session = DialogSession(state=ConversationState(city="Lviv"))
        store.save("conv_1", session)

        session.state.city = "Kyiv"

        assert store.load("conv_1").state.city == "Lviv"

    def test_delete(self, store):
        store.save("conv_1", DialogSession())

        assert store.delete("conv_1") is True
        assert store.delete("conv_1") is False

    def test_session_id_format(self):
        """Test that generated IDs are prefixed and unique."""
        first = SessionStore.generate_session_id()
        second = SessionStore.generate_session_id()

        assert first.startswith("conv_")
        assert len(first) == len("conv_") + 12
        assert first != second


class TestSessionStoreInterface:
    """Test suite for the SessionStore abstract base class."""

    def test_base_class_cannot_be_instantiated(self):
        with pytest.raises(TypeError):
            SessionStore()

    def test_incomplete_subclass_cannot_be_instantiated(self):
        """Test that a store missing delete is rejected at construction time."""
        class PartialStore(SessionStore):
            def load(self, session_id):
                return DialogSession()

            def save(self, session_id, session):
                pass

        with pytest.raises(TypeError, match="delete"):
            PartialStore()


class TestSessionLocks:
    """Test suite for per-session turn locks."""

    def test_lock_is_released_and_forgotten(self):
        locks = SessionLocks()

        with locks.hold("conv_1"):
            assert len(locks) == 1

        assert len(locks) == 0

    def test_lock_is_forgotten_after_error(self):
        locks = SessionLocks()

        with pytest.raises(RuntimeError):
            with locks.hold("conv_1"):
                raise RuntimeError("turn failed")

        assert len(locks) == 0

    def test_same_session_is_mutually_exclusive(self):
        """Test that a second holder of one session waits for the first to finish."""
        locks = SessionLocks()
        events = []

        def turn(name):
            with locks.hold("conv_1"):
                events.append(f"{name}-start")
                time.sleep(0.1)
                events.append(f"{name}-end")

        threads = [threading.Thread(target=turn, args=(name,)) for name in ("a", "b")]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert events[0].endswith("-start")
        assert events[1] == events[0].replace("-start", "-end")
        assert len(locks) == 0

    def test_different_sessions_do_not_block(self):
        locks = SessionLocks()

        with locks.hold("conv_1"):
            acquired = threading.Event()

            def other():
                with locks.hold("conv_2"):
                    acquired.set()

            thread = threading.Thread(target=other)
            thread.start()
            assert acquired.wait(timeout=1.0)
            thread.join()


class TestSupabaseSessionStore:
    """Test suite for SupabaseSessionStore with a mocked Supabase client."""

    @pytest.fixture
    def supabase_client(self):
        with patch('services.session_store.create_client') as mock_create:
            client = Mock()
            mock_create.return_value = client
            yield client

    @pytest.fixture
    def store(self, supabase_client):
        return SupabaseSessionStore(supabase_url="https://db.test", supabase_key="test_key")

    def test_missing_credentials_raise(self):
        with pytest.raises(ValueError, match="SUPABASE_URL and SUPABASE_KEY"):
            SupabaseSessionStore(supabase_url=None, supabase_key=None)

    def test_load_existing_session(self, store, supabase_client):
        query = supabase_client.table.return_value.select.return_value.eq.return_value
        query.execute.return_value = Mock(data=[{
            "session_id": "conv_1",
            "has_state": True,
            "city": "Rivne",
            "forecast_type": None,
            "pending_step": "ask_forecast_type",
            "updated_at": "2026-10-18T10:00:00"
        }])

        session = store.load("conv_1")

        assert session.state == ConversationState(city="Rivne")
        assert session.pending_step == DialogStep.ASK_FORECAST_TYPE
        supabase_client.table.assert_called_with("weather_sessions")

    def test_load_missing_session(self, store, supabase_client):
        query = supabase_client.table.return_value.select.return_value.eq.return_value
        query.execute.return_value = Mock(data=[])

        assert store.load("conv_missing") == DialogSession()

    def test_save_upserts_row(self, store, supabase_client):
        store.save("conv_1", DialogSession(state=ConversationState(city="Rivne"), pending_step=DialogStep.ASK_FORECAST_TYPE))

        upsert = supabase_client.table.return_value.upsert
        row = upsert.call_args[0][0]
        assert row["session_id"] == "conv_1"
        assert row["city"] == "Rivne"
        assert row["pending_step"] == "ask_forecast_type"
        assert upsert.call_args[1] == {"on_conflict": "session_id"}

    def test_save_error_is_raised(self, store, supabase_client):
        supabase_client.table.return_value.upsert.return_value.execute.side_effect = RuntimeError("db down")

        with pytest.raises(RuntimeError, match="db down"):
            store.save("conv_1", DialogSession())


class TestCreateSessionStore:
    """Test suite for the session store factory."""

    def test_memory_backend(self):
        assert isinstance(create_session_store("memory"), InMemorySessionStore)

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown session store"):
            create_session_store("redis")
