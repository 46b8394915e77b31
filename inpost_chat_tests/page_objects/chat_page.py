"""Page object for the InPost contact page and its MAT chat widget."""
import time

from typing import List, Optional, Sequence

from playwright.sync_api import FrameLocator, Locator, Page, expect
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from inpost_chat_tests.config import Settings, get_settings
from inpost_chat_tests.extraction import (
    ACTION_STRATEGIES,
    PROBE_STRATEGIES,
    RESPONSE_STRATEGIES,
    collect_fragments,
)
from inpost_chat_tests.filters import (
    classify_actions,
    classify_responses,
    find_keyword_fragments,
)
from inpost_chat_tests.step import info, step

from .transcript import ChatTranscript


class ChatPageSelectors:
    """Selectors and accessible names for the chat widget."""

    CHAT_IFRAME = 'iframe[title="chatbot"]'
    BODY = "body"
    BUTTON = "button"

    # (role, accessible name)
    COOKIE_ACCEPT = ("button", "ACCEPT")
    ASK_MAT_BUTTON = ("button", "Zapytaj MATa")
    CHAT_TAB = ("button", "Chat")
    MESSAGE_INPUT = ("textbox", "Twoja wiadomość")
    SEND_BUTTON = ("button", "Send")


class InPostChatPage:
    """Page object for driving the chatbot and scraping its replies."""
    DEBUG_HTML_CHARS = 1000
    DEBUG_RAW_TEXTS = 10
    DEBUG_BUTTONS = 4

    def __init__(self, page: Page, settings: Optional[Settings] = None):
        self.page = page
        self.settings = settings or get_settings()
        self.selectors = ChatPageSelectors
        self.transcript = ChatTranscript()
        self._baseline: Optional[int] = None

    # === Locators ===
    @property
    def cookie_accept_button(self) -> Locator:
        role, name = self.selectors.COOKIE_ACCEPT
        return self.page.get_by_role(role, name=name)

    @property
    def ask_mat_button(self) -> Locator:
        role, name = self.selectors.ASK_MAT_BUTTON
        return self.page.get_by_role(role, name=name)

    @property
    def chat_tab(self) -> Locator:
        role, name = self.selectors.CHAT_TAB
        return self.page.get_by_role(role, name=name)

    @property
    def chat_frame(self) -> FrameLocator:
        return self.page.frame_locator(self.selectors.CHAT_IFRAME)

    @property
    def message_input(self) -> Locator:
        role, name = self.selectors.MESSAGE_INPUT
        return self.chat_frame.get_by_role(role, name=name)

    @property
    def send_button(self) -> Locator:
        role, name = self.selectors.SEND_BUTTON
        return self.chat_frame.get_by_role(role, name=name)

    # === Navigation ===
    def open(self) -> None:
        self.page.goto(self.settings.chat_url)

    def accept_cookies(self) -> bool:
        """Accept the cookie banner if it shows up."""
        try:
            self.cookie_accept_button.click(timeout=self.settings.cookie_timeout)
        except PlaywrightTimeoutError:
            info("No cookies banner found")
            return False
        info("Cookies accepted")
        return True

    def open_chat(self) -> None:
        self.ask_mat_button.click()
        self.wait(self.settings.launcher_wait)
        self.chat_tab.click()

    def verify_ready(self) -> None:
        expect(self.message_input).to_be_visible()

    def start(self) -> None:
        """Navigate to the contact page and open the chat widget."""
        with step(f"Navigate to {self.settings.chat_url}"):
            self.open()

        with step("Handle cookie banner"):
            self.accept_cookies()

        with step("Open chat interface via 'Zapytaj MATa'"):
            self.open_chat()

        with step("Verify chat message input is visible"):
            self.verify_ready()

    # === Actions ===
    def send_message(self, message: str) -> None:
        """Type a message and send it; it is remembered for echo suppression."""
        if self.settings.wait_strategy == "poll":
            self._baseline = self.fragment_count()
        self.message_input.fill(message)
        self.send_button.click()
        self.transcript.messages.append(message)

    # === Waits ===
    def wait(self, ms: int) -> None:
        self.page.wait_for_timeout(ms)

    def fragment_count(self, strategies: Sequence = RESPONSE_STRATEGIES) -> int:
        return len(collect_fragments(self.chat_frame, strategies, verbose=False, log_failures=False))

    def wait_for_fragments(
        self,
        previous: int,
        timeout: int,
        strategies: Sequence = RESPONSE_STRATEGIES,
        until_stable: bool = False,
    ) -> bool:
        """Poll the chat until its fragment count changes (or stops changing).

        Args:
            previous: Fragment count to compare against
            timeout: Upper bound in ms; the wait never raises
            strategies: Strategies used for counting
            until_stable: Wait for two equal consecutive counts instead

        Returns:
            True if the condition was met before the timeout
        """
        deadline = time.monotonic() + timeout / 1000
        while time.monotonic() < deadline:
            self.wait(self.settings.poll_interval)
            count = self.fragment_count(strategies)
            if (count == previous) == until_stable:
                return True
            previous = count
        return False

    def wait_for_response(self, ms: Optional[int] = None) -> None:
        """Wait for the bot to answer the last message."""
        ms = self.settings.response_wait if ms is None else ms
        if self.settings.wait_strategy == "poll" and self._baseline is not None:
            self.wait_for_fragments(self._baseline, ms)
            self._baseline = None
        else:
            self.wait(ms)

    def settle(self, ms: int) -> None:
        """Let chat content stabilise before scraping."""
        if self.settings.wait_strategy == "poll":
            self.wait_for_fragments(self.fragment_count(), ms, until_stable=True)
        else:
            self.wait(ms)

    # === Scraping ===
    def scrape_responses(self, sent_text: Optional[str] = None) -> List[str]:
        """Scrape bot responses from the chat frame.

        Args:
            sent_text: Text to suppress as echoed input; defaults to every
                message sent so far, space-joined

        Returns:
            Unique responses, empty on any error
        """
        if sent_text is None:
            sent_text = self.transcript.sent_text
        try:
            self.settle(self.settings.scrape_settle)
            info("Extracting chat content")
            fragments = collect_fragments(self.chat_frame, RESPONSE_STRATEGIES)
            responses = classify_responses(fragments, sent_text)
            info(f"Extracted {len(responses)} unique responses")
            if not responses and self.settings.debug:
                self._log_debug_snapshot(fragments)
        except Exception as e:
            info(f"Error scraping chat responses: {e}", outcome="failed")
            return []

        self.transcript.responses = responses
        return responses

    def scrape_action_buttons(self) -> List[str]:
        """Scrape suggested action buttons from the chat frame."""
        try:
            self.settle(self.settings.action_settle)
            info("Extracting action buttons")
            if self.settings.debug:
                self._log_button_structure()
            fragments = collect_fragments(self.chat_frame, ACTION_STRATEGIES)
            actions = classify_actions(fragments)
            info(f"Extracted {len(actions)} action buttons")
        except Exception as e:
            info(f"Error scraping action buttons: {e}", outcome="failed")
            return []

        self.transcript.actions = actions
        return actions

    def probe_potential_actions(self) -> List[str]:
        """Log any chat text mentioning an action keyword."""
        try:
            fragments = collect_fragments(self.chat_frame, PROBE_STRATEGIES, verbose=False)
            found = find_keyword_fragments(fragments)
        except Exception as e:
            info(f"Error probing potential actions: {e}", outcome="failed")
            return []

        if found:
            info(f"Found potential action texts: {found}")
        self.transcript.potential_actions = found
        return found

    # === Diagnostics ===
    def _log_debug_snapshot(self, fragments: List[str]) -> None:
        info("No responses found - logging debug info")
        try:
            html = self.chat_frame.locator(self.selectors.BODY).inner_html()
            info(f"Chat HTML structure (first {self.DEBUG_HTML_CHARS} chars): {html[:self.DEBUG_HTML_CHARS]}")
            for index, text in enumerate(fragments[:self.DEBUG_RAW_TEXTS], 1):
                info(f"Raw text {index}: \"{text[:100]}\"")
        except Exception as e:
            info(f"Debug logging failed: {e}", outcome="failed")

    def _log_button_structure(self) -> None:
        buttons = self.chat_frame.locator(self.selectors.BUTTON).all()
        for index, button in enumerate(buttons[:self.DEBUG_BUTTONS], 1):
            inner_html = button.inner_html()
            children = button.locator("*").all_text_contents()
            info(
                f"Button {index}: "
                f"textContent=\"{button.text_content() or 'EMPTY'}\" "
                f"innerText=\"{button.inner_text() or 'EMPTY'}\" "
                f"innerHTML=\"{inner_html[:100] if inner_html else 'EMPTY'}\" "
                f"children=[{', '.join(children)}] "
                f"aria-label=\"{button.get_attribute('aria-label') or 'NONE'}\" "
                f"title=\"{button.get_attribute('title') or 'NONE'}\" "
                f"data-testid=\"{button.get_attribute('data-testid') or 'NONE'}\""
            )
