import pytest
from playwright.sync_api import Page, expect

from inpost_chat_tests.config import Settings, get_settings
from inpost_chat_tests.page_objects import InPostChatPage
from inpost_chat_tests.plugin import ResultCollectorPlugin, get_current_plugin, set_current_plugin


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--live",
        action="store_true",
        default=False,
        help="Run scenarios against the live inpost.pl chat widget",
    )


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: browser-free tests")
    config.addinivalue_line("markers", "live: talks to the real chat widget")
    config.addinivalue_line("markers", "scenario: end-to-end conversation scenarios")


def pytest_collection_modifyitems(config, items):
    """Skip live scenarios unless --live was given."""
    if config.getoption("--live"):
        return

    skip_live = pytest.mark.skip(reason="live scenario, run with --live")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


@pytest.fixture(scope="session", autouse=True)
def settings():
    """Get test settings."""
    return get_settings()


@pytest.fixture(scope="session", autouse=True)
def configure_expect_timeout(settings):
    """Set global expect timeout from settings."""
    expect.set_options(timeout=settings.expect_timeout)


@pytest.fixture
def context(browser):
    """Create a new browser context with a Polish locale."""
    context = browser.new_context(
        locale="pl-PL",
        viewport={'width': 1440, 'height': 900},
    )
    yield context
    context.close()


@pytest.fixture
def page(context, settings):
    page = context.new_page()
    page.set_default_timeout(settings.timeout)
    yield page
    page.close()


@pytest.fixture
def chat_page(page: Page, settings) -> InPostChatPage:
    """Open the contact page and the chat widget, ready for messages."""
    chat_page = InPostChatPage(page, settings)
    chat_page.start()
    return chat_page


# =============================================================================
# Browser-free fakes
# =============================================================================

class FakeElement:
    """Stand-in for a single element handle behind a locator."""

    def __init__(self, text=None, inner_text=None, attrs=None, html="", children=()):
        self.text = text
        self._inner_text = inner_text
        self.attrs = attrs or {}
        self.html = html
        self.children = list(children)

    def text_content(self):
        return self.text

    def inner_text(self):
        return self._inner_text if self._inner_text is not None else (self.text or "")

    def inner_html(self):
        return self.html

    def get_attribute(self, name):
        return self.attrs.get(name)

    def locator(self, selector):
        return FakeLocator([FakeElement(child) for child in self.children])


class FakeLocator:
    """Locator over a fixed list of fake elements."""

    def __init__(self, elements=(), error=None, owner=None, key=None):
        self.elements = list(elements)
        self.error = error
        self.owner = owner
        self.key = key

    def _check(self):
        if self.error:
            raise self.error

    def all_text_contents(self):
        self._check()
        return [element.text for element in self.elements]

    def all(self):
        self._check()
        return list(self.elements)

    def inner_html(self):
        self._check()
        return "".join(element.html for element in self.elements)

    def click(self, timeout=None):
        self._check()
        self.owner.actions.append(("click", self.key))

    def fill(self, value):
        self._check()
        self.owner.actions.append(("fill", self.key, value))


class FakeRoot:
    """Anything exposing locator(); values may be lists, callables or exceptions."""

    def __init__(self, content=None, roles=None):
        self.content = content or {}
        self.roles = roles or {}
        self.actions = []
        self.queries = []

    def _elements(self, value):
        if callable(value):
            value = value()
        return [v if isinstance(v, FakeElement) else FakeElement(v) for v in value]

    def locator(self, selector):
        self.queries.append(selector)
        value = self.content.get(selector, [])
        if isinstance(value, Exception):
            return FakeLocator(error=value)
        return FakeLocator(self._elements(value))

    def get_by_role(self, role, name=None):
        return FakeLocator(error=self.roles.get((role, name)), owner=self, key=(role, name))


class FakePage(FakeRoot):
    """Page with an embedded chat frame; waits are recorded, not slept."""

    def __init__(self, frame=None, **kwargs):
        super().__init__(**kwargs)
        self.frame = frame or FakeRoot()
        self.waits = []
        self.visited = []

    def frame_locator(self, selector):
        return self.frame

    def wait_for_timeout(self, ms):
        self.waits.append(ms)

    def goto(self, url):
        self.visited.append(url)


@pytest.fixture
def events():
    """Step and result events emitted during the test."""
    previous = get_current_plugin()
    plugin = ResultCollectorPlugin()
    set_current_plugin(plugin)
    yield plugin.results
    set_current_plugin(previous)


@pytest.fixture
def make_root():
    return FakeRoot


@pytest.fixture
def make_element():
    return FakeElement


@pytest.fixture
def make_page():
    return FakePage


@pytest.fixture
def fast_settings():
    """Settings with tiny waits for browser-free page object tests."""
    return Settings(
        _env_file=None,
        cookie_timeout=10,
        launcher_wait=1,
        response_wait=1,
        scrape_settle=2,
        action_settle=3,
        action_load_wait=4,
        poll_interval=1,
    )
