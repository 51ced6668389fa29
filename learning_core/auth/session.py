# =============================================================================
# learning_core/auth/session.py
# Auth state consumed by the sync layer
# =============================================================================
"""
The sync coordinator is driven by three inputs: whether the auth check is
still loading, whether a session exists, and whether demo mode is on.

``AuthStateManager`` owns that triple and notifies async listeners on every
change. ``SupabaseAuthBridge`` feeds it from Supabase Auth (initial
``get_session`` plus ``on_auth_state_change``) and answers the per-call
identity lookup the stores use.
"""

from __future__ import annotations
import asyncio
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, List, Optional, Set

from learning_core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class AuthSession:
    user_id: str
    email: Optional[str] = None
    access_token: Optional[str] = None


@dataclass(frozen=True)
class AuthState:
    is_loading: bool = True
    session: Optional[AuthSession] = None
    is_demo_mode: bool = False

    @property
    def user_id(self) -> Optional[str]:
        return self.session.user_id if self.session else None


AuthListener = Callable[[AuthState], Awaitable[None]]


class AuthStateManager:
    """
    Holds the current AuthState.

    Usage:
        auth = AuthStateManager()
        auth.register_listener(on_change)
        await auth.resolve(AuthSession(user_id="..."))   # signed in
        await auth.set_demo_mode(True)
    """

    def __init__(self, initial: Optional[AuthState] = None):
        self._state = initial or AuthState()
        self._listeners: List[AuthListener] = []

    @property
    def state(self) -> AuthState:
        return self._state

    def register_listener(self, listener: AuthListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unregister_listener(self, listener: AuthListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def _publish(self, new_state: AuthState) -> None:
        if new_state == self._state:
            return
        old = self._state
        self._state = new_state
        logger.info(
            f"Auth state changed: loading={new_state.is_loading} "
            f"user={new_state.user_id} demo={new_state.is_demo_mode} (was user={old.user_id})"
        )
        for listener in list(self._listeners):
            try:
                await listener(new_state)
            except Exception as e:
                logger.error(f"Error in auth listener: {e}", exc_info=True)

    async def resolve(self, session: Optional[AuthSession]) -> None:
        """Auth check finished (or changed). A session turns demo mode off."""
        await self._publish(replace(
            self._state,
            is_loading=False,
            session=session,
            is_demo_mode=False if session else self._state.is_demo_mode,
        ))

    async def sign_out(self) -> None:
        await self.resolve(None)

    async def set_demo_mode(self, enabled: bool) -> None:
        await self._publish(replace(self._state, is_demo_mode=enabled))

    async def get_current_identity(self) -> Optional[str]:
        return self._state.user_id


def to_auth_session(session: Any) -> Optional[AuthSession]:
    """Convert a supabase-auth Session object into an AuthSession."""
    if session is None or getattr(session, "user", None) is None:
        return None
    user = session.user
    return AuthSession(
        user_id=str(user.id),
        email=getattr(user, "email", None),
        access_token=getattr(session, "access_token", None),
    )


class SupabaseAuthBridge:
    """Connects Supabase Auth to an AuthStateManager."""

    def __init__(self, client: Any, manager: AuthStateManager):
        self.client = client
        self.manager = manager
        self._subscription = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._pending: Set[asyncio.Task] = set()

    async def start(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._subscription = self.client.auth.on_auth_state_change(self._on_auth_event)

        try:
            session = await self.client.auth.get_session()
        except Exception as e:
            logger.error(f"Initial session check failed: {e}")
            session = None
        await self.manager.resolve(to_auth_session(session))

    def _on_auth_event(self, event: Any, session: Any) -> None:
        logger.info(f"Supabase auth event: {event}")
        if self._loop is None:
            return
        coro = self.manager.resolve(to_auth_session(session))
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self._loop:
            task = self._loop.create_task(coro)
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
        else:
            asyncio.run_coroutine_threadsafe(coro, self._loop)

    async def get_current_identity(self) -> Optional[str]:
        """Ask Supabase who is signed in right now."""
        try:
            response = await self.client.auth.get_user()
        except Exception as e:
            logger.warning(f"Identity lookup failed: {e}")
            return None
        user = getattr(response, "user", None)
        return str(user.id) if user else None

    async def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
