"""FastAPI dependencies for injection."""
from core.config import get_settings
from core.namespaces import get_namespace_registry
from db.session import get_async_session

__all__ = [
    "get_async_session",
    "get_namespace_registry",
    "get_settings",
]
