# =============================================================================
# learning_core/state/session.py
# Streamlit session-state binding for the learning context
# =============================================================================

import streamlit as st

from learning_core.logging import get_logger, setup_logging
from learning_core.state.runtime import EventLoopThread
from learning_core.ui.notifications import QueuedNotifier

logger = get_logger(__name__)

# Central registry for session-state keys used by the pages.
SESSION_DEFAULTS = {
    "learning_ctx": None,
    "notifier": None,
    "selected_topic_id": "all",
    "selected_tag": "all",
    "search_term": "",
    "_ctx_error": None,
}


def init_state():
    """Initialize session state with defaults."""
    for k, v in SESSION_DEFAULTS.items():
        if k not in st.session_state:
            st.session_state[k] = v
    if st.session_state["notifier"] is None:
        st.session_state["notifier"] = QueuedNotifier()


def get_runtime() -> EventLoopThread:
    runtime = EventLoopThread.get_instance()
    if not runtime.is_running:
        setup_logging()
        runtime.start()
    return runtime


def get_learning_context():
    """
    Return this session's LearningContext, creating and starting it on first use.

    Returns None when the Supabase connection cannot be set up; the reason is
    kept in ``st.session_state["_ctx_error"]``.
    """
    init_state()
    ctx = st.session_state["learning_ctx"]
    if ctx is not None:
        return ctx

    from learning_core.errors import ConfigurationError
    from learning_core.services.learning_context import LearningContext

    runtime = get_runtime()
    try:
        ctx = runtime.run(LearningContext.from_supabase(notifier=st.session_state["notifier"]))
        runtime.run(ctx.start())
    except ConfigurationError as e:
        logger.error(f"Learning context not available: {e}")
        st.session_state["_ctx_error"] = e.message
        return None

    st.session_state["learning_ctx"] = ctx
    st.session_state["_ctx_error"] = None
    return ctx


def run_action(coro):
    """Run a context coroutine from a page callback and block for its result."""
    return get_runtime().run(coro)


def close_learning_context():
    """Tear down this session's context (e.g. on logout)."""
    ctx = st.session_state.get("learning_ctx")
    if ctx is not None:
        get_runtime().run(ctx.close())
        st.session_state["learning_ctx"] = None
