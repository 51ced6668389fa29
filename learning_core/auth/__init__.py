from .session import (
    AuthSession,
    AuthState,
    AuthStateManager,
    SupabaseAuthBridge,
    to_auth_session,
)

__all__ = ["AuthSession", "AuthState", "AuthStateManager", "SupabaseAuthBridge", "to_auth_session"]
