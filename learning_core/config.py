# =============================================================================
# learning_core/config.py
# Configuration for the Supabase connection and the sync layer
# =============================================================================

from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from learning_core.errors import ConfigurationError
from learning_core.logging import get_logger

logger = get_logger(__name__)

# Remote table names (must match the Supabase schema)
TABLES: Dict[str, str] = {
    "topics": "topics",
    "methods": "learning_methods",
    "journals": "journal_entries",
    "resources": "resources",
    "categories": "categories",
}


@dataclass(frozen=True)
class SupabaseConfig:
    url: str
    key: str
    schema: str = "public"


@dataclass(frozen=True)
class SyncConfig:
    """
    Behaviour switches for the data sync coordinator.

    seed_on_empty: an authenticated account whose table is empty is shown the
        seed content for that kind (onboarding). Turn off to show it empty.
    realtime_enabled: subscribe to change notifications while signed in.
    """
    seed_on_empty: bool = True
    realtime_enabled: bool = True


def _read_streamlit_secrets() -> Optional[Dict[str, Any]]:
    """Return the [supabase] secrets section, or None when unavailable."""
    try:
        import streamlit as st

        if "supabase" in st.secrets:
            return dict(st.secrets["supabase"])
    except FileNotFoundError:
        # No secrets.toml at all
        return None
    except Exception as e:
        logger.debug(f"Streamlit secrets not readable: {e}")
    return None


def load_supabase_config(secrets: Optional[Dict[str, Any]] = None) -> SupabaseConfig:
    """
    Resolve Supabase credentials.

    Looks in this order:
        1. the ``secrets`` argument
        2. ``.streamlit/secrets.toml``:
               [supabase]
               url = "https://your-project.supabase.co"
               key = "your-anon-key"
        3. SUPABASE_URL / SUPABASE_KEY environment variables

    Raises:
        ConfigurationError: if no url/key pair is found
    """
    section = secrets if secrets is not None else _read_streamlit_secrets()
    section = section or {}

    url = section.get("url") or os.getenv("SUPABASE_URL")
    key = section.get("key") or os.getenv("SUPABASE_KEY")
    schema = section.get("schema") or os.getenv("SUPABASE_SCHEMA") or "public"

    if not url:
        raise ConfigurationError("Supabase URL is not configured", config_key="supabase.url")
    if not key:
        raise ConfigurationError("Supabase key is not configured", config_key="supabase.key")

    return SupabaseConfig(url=url, key=key, schema=schema)
