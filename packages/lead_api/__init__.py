"""Voice Lead Collection - API Package."""

from .app import AppState, create_app, get_app_state
from .config_routes import config_router
from .models import (
    ChatMessageRequest,
    ChatMessageResponse,
    ErrorResponse,
    SessionResponse,
    StartChatResponse,
)
from .routes import router

__version__ = "0.1.0"

__all__ = [
    "AppState",
    "ChatMessageRequest",
    "ChatMessageResponse",
    "ErrorResponse",
    "SessionResponse",
    "StartChatResponse",
    "config_router",
    "create_app",
    "get_app_state",
    "router",
]
