# =============================================================================
# tests/unit/test_config_and_notifications.py
# Unit Tests for configuration loading, notifiers and the loop thread
# =============================================================================

import pytest

from learning_core.config import SyncConfig, load_supabase_config
from learning_core.errors import ConfigurationError
from learning_core.logging import LogContext, get_logger
from learning_core.state.runtime import EventLoopThread
from learning_core.ui.notifications import LogNotifier, QueuedNotifier, flush_notifications


class TestSupabaseConfig:
    """Credential resolution"""

    def test_from_explicit_secrets(self):
        config = load_supabase_config({"url": "https://x.supabase.co", "key": "anon"})
        assert config.url == "https://x.supabase.co"
        assert config.key == "anon"
        assert config.schema == "public"

    def test_from_streamlit_secrets(self, mock_streamlit):
        mock_streamlit.secrets = {"supabase": {"url": "https://s.supabase.co", "key": "k", "schema": "tracker"}}
        config = load_supabase_config()
        assert config.url == "https://s.supabase.co"
        assert config.schema == "tracker"

    def test_from_environment(self, mock_streamlit, monkeypatch):
        monkeypatch.setenv("SUPABASE_URL", "https://env.supabase.co")
        monkeypatch.setenv("SUPABASE_KEY", "env-key")
        config = load_supabase_config()
        assert config.url == "https://env.supabase.co"
        assert config.key == "env-key"

    def test_missing_url_raises(self, mock_streamlit, monkeypatch):
        monkeypatch.delenv("SUPABASE_URL", raising=False)
        monkeypatch.delenv("SUPABASE_KEY", raising=False)
        with pytest.raises(ConfigurationError) as exc:
            load_supabase_config()
        assert exc.value.details["config_key"] == "supabase.url"

    def test_missing_key_raises(self, monkeypatch):
        monkeypatch.delenv("SUPABASE_KEY", raising=False)
        with pytest.raises(ConfigurationError):
            load_supabase_config({"url": "https://x.supabase.co"})

    def test_sync_defaults(self):
        config = SyncConfig()
        assert config.seed_on_empty
        assert config.realtime_enabled


class TestNotifiers:
    """Queued and logging notifiers"""

    def test_queue_drains_in_order(self):
        notifier = QueuedNotifier()
        notifier.success("Topic added successfully")
        notifier.error("Failed to save topic to database")

        drained = notifier.drain()

        assert [(n.level, n.message) for n in drained] == [
            ("success", "Topic added successfully"),
            ("error", "Failed to save topic to database"),
        ]
        assert notifier.drain() == []

    def test_queue_is_bounded(self):
        notifier = QueuedNotifier(maxlen=2)
        for i in range(5):
            notifier.info(str(i))
        assert [n.message for n in notifier.drain()] == ["3", "4"]

    def test_flush_renders_toasts(self, mock_streamlit):
        notifier = QueuedNotifier()
        notifier.success("Category added successfully")
        notifier.error("Category not found")

        shown = flush_notifications(notifier)

        assert shown == 2
        assert mock_streamlit.toast.call_count == 2
        mock_streamlit.toast.assert_any_call("Category added successfully", icon="✅")

    def test_log_notifier(self, caplog):
        with caplog.at_level("INFO"):
            LogNotifier().success("Resource added successfully")
        assert "Resource added successfully" in caplog.text


class TestEventLoopThread:
    """Background loop used by the Streamlit pages"""

    def test_run_returns_coroutine_result(self):
        runtime = EventLoopThread()

        async def answer():
            return 42

        try:
            assert runtime.run(answer()) == 42
            assert runtime.is_running
        finally:
            runtime.stop()
        assert not runtime.is_running

    def test_singleton(self):
        assert EventLoopThread.get_instance() is EventLoopThread.get_instance()


class TestLogContext:
    """Timed operation logging"""

    def test_records_elapsed_and_outcome(self, caplog):
        logger = get_logger("learning_core.tests")
        with caplog.at_level("INFO"):
            with LogContext(logger, "Fetching data for user-1") as op:
                pass

        assert op.elapsed is not None and op.elapsed >= 0
        assert "Fetching data for user-1 completed" in caplog.text

    def test_failure_is_logged_and_propagates(self, caplog):
        logger = get_logger("learning_core.tests")
        with pytest.raises(RuntimeError):
            with LogContext(logger, "Loading categories"):
                raise RuntimeError("socket closed")

        assert "Loading categories failed" in caplog.text
