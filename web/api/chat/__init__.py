"""Chat API."""

from web.api.chat.views import ask, ask_stream, get_history

__all__ = [
    "ask",
    "ask_stream",
    "get_history",
]
