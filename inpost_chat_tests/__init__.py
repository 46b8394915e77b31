"""InPost Chat Tests - Playwright automation for the InPost MAT chatbot.

This package provides:
- Live scenarios that talk to the chat widget on inpost.pl/kontakt
- Heuristic scraping of bot responses and suggested action buttons
- JSONL run logs and their analysis

Usage:
    CLI: python -m inpost_chat_tests.main run
"""

__version__ = "1.0.0"
