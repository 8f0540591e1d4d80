"""Core app configuration, database, security primitives and error taxonomy."""

from planner_auth.core.config import get_settings, settings
from planner_auth.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
