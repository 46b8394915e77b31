"""Page objects for Playwright chat testing."""

from .chat_page import ChatPageSelectors, InPostChatPage
from .transcript import ChatTranscript

__all__ = ["ChatPageSelectors", "InPostChatPage", "ChatTranscript"]
