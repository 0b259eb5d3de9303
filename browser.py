"""
Rendered page access.

The migration only talks to the site through a PageAccessor. The Selenium
implementation below drives Chrome; lists of elements are read by pulling the
container's HTML once and parsing it with lxml, which is much faster than one
WebDriver round trip per element.
"""

import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from lxml import html as lxml_html
from selenium import webdriver
from selenium.common.exceptions import NoSuchElementException, StaleElementReferenceException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service
from selenium.webdriver.common.by import By

from configuration import BrowserConfiguration
from errors import ElementNotFound
from page_logger import PageLogger


@dataclass(frozen=True)
class Locator:
    """A Selenium (by, value) pair, optionally scoped to a container."""

    by: str
    value: str
    within: Optional['Locator'] = None

    def __str__(self):
        own = f"{self.by}={self.value}"
        return f"{self.within} > {own}" if self.within is not None else own


def css_for(locator: Locator) -> str:
    """CSS selector equivalent of a locator's own (by, value) pair."""
    if locator.by == By.ID:
        return f"#{locator.value}"
    if locator.by == By.CLASS_NAME:
        return f".{locator.value}"
    if locator.by in (By.TAG_NAME, By.CSS_SELECTOR):
        return locator.value
    raise ValueError(f"No CSS equivalent for locator strategy '{locator.by}'")


def clean_text(text: str) -> str:
    """Normalise raw markup text the way a browser renders it on one line."""
    text = text.replace(u'\u00a0', ' ')
    return re.sub(r'\s+', ' ', text).strip()


class ElementHandle(ABC):
    """One element out of a get_all_matching() result."""

    @abstractmethod
    def get_text(self, locator: Optional[Locator] = None) -> str:
        """Text of this element, or of the first descendant matching locator."""

    @abstractmethod
    def get_attribute(self, name: str, locator: Optional[Locator] = None) -> Optional[str]:
        """Attribute of this element, or of the first descendant matching locator."""


class PageAccessor(ABC):
    """Capability to navigate and read the currently rendered page."""

    @abstractmethod
    def goto(self, url: str):
        pass

    @abstractmethod
    def get_text(self, locator: Locator) -> str:
        """Raises ElementNotFound when nothing matches."""

    @abstractmethod
    def exists(self, locator: Locator) -> bool:
        pass

    @abstractmethod
    def get_attribute(self, locator: Locator, name: str) -> Optional[str]:
        """Raises ElementNotFound when nothing matches; None for a missing attribute."""

    @abstractmethod
    def get_all_matching(self, locator: Locator) -> List[ElementHandle]:
        """All matches in document order; empty when the container is missing."""

    @abstractmethod
    def click(self, locator: Locator):
        pass

    @abstractmethod
    def fill(self, locator: Locator, value: str):
        pass

    def find_text(self, locator: Locator) -> Optional[str]:
        """Text of the element, or None when it is not on the page."""
        try:
            return self.get_text(locator)
        except ElementNotFound:
            return None

    def find_attribute(self, locator: Locator, name: str) -> Optional[str]:
        """Attribute of the element, or None when the element or attribute is missing."""
        try:
            return self.get_attribute(locator, name)
        except ElementNotFound:
            return None


class LxmlElement(ElementHandle):
    """Element handle backed by a parsed lxml tree."""

    def __init__(self, element):
        self._element = element

    def _resolve(self, locator: Optional[Locator]):
        if locator is None:
            return self._element
        return select_first(self._element, locator)

    def get_text(self, locator: Optional[Locator] = None) -> str:
        return clean_text(self._resolve(locator).text_content())

    def get_attribute(self, name: str, locator: Optional[Locator] = None) -> Optional[str]:
        return self._resolve(locator).get(name)


def select_first(root, locator: Locator):
    """First element under root matching locator (and its containers)."""
    if locator.within is not None:
        root = select_first(root, locator.within)
    matches = root.cssselect(css_for(locator))
    if not matches:
        raise ElementNotFound(str(locator))
    return matches[0]


def parse_elements(markup: str, locator: Locator, base_url: Optional[str] = None,
                   fragment: bool = False) -> List[LxmlElement]:
    """
    Parse HTML and return handles for every element matching locator.

    Args:
        markup: A full page, or a container's innerHTML when fragment is True
        locator: What to match; its own 'within' chain is applied inside markup
        base_url: Links (href, src) are made absolute against this URL

    Returns:
        Matching elements in document order
    """
    if not markup or not markup.strip():
        return []

    if fragment:
        root = lxml_html.fragment_fromstring(markup, create_parent='div')
    else:
        root = lxml_html.fromstring(markup)
    if base_url:
        root.make_links_absolute(base_url)

    if locator.within is not None:
        try:
            root = select_first(root, locator.within)
        except ElementNotFound:
            return []
    return [LxmlElement(el) for el in root.cssselect(css_for(locator))]


class SeleniumPageAccessor(PageAccessor):
    """PageAccessor driving a Selenium WebDriver."""

    def __init__(self, driver, page_logger: Optional[PageLogger] = None, click_delay: float = 0):
        self.driver = driver
        self.page_logger = page_logger
        self.click_delay = click_delay

    def _find(self, locator: Locator):
        parent = self.driver if locator.within is None else self._find(locator.within)
        try:
            return parent.find_element(locator.by, locator.value)
        except (NoSuchElementException, StaleElementReferenceException) as e:
            raise ElementNotFound(str(locator)) from e

    def goto(self, url: str):
        if self.page_logger is not None:
            self.page_logger.log_page_get(url)
        self.driver.get(url)

    def get_text(self, locator: Locator) -> str:
        try:
            return self._find(locator).text
        except StaleElementReferenceException as e:
            raise ElementNotFound(str(locator)) from e

    def exists(self, locator: Locator) -> bool:
        try:
            self._find(locator)
        except ElementNotFound:
            return False
        return True

    def get_attribute(self, locator: Locator, name: str) -> Optional[str]:
        try:
            return self._find(locator).get_attribute(name)
        except StaleElementReferenceException as e:
            raise ElementNotFound(str(locator)) from e

    def get_all_matching(self, locator: Locator) -> List[ElementHandle]:
        base_url = self.driver.current_url
        if locator.within is None:
            return parse_elements(self.driver.page_source, locator, base_url)

        try:
            container = self._find(locator.within)
            markup = container.get_attribute('innerHTML')
        except (ElementNotFound, StaleElementReferenceException):
            return []
        return parse_elements(markup, Locator(locator.by, locator.value), base_url, fragment=True)

    def click(self, locator: Locator):
        element = self._find(locator)
        if self.page_logger is not None:
            self.page_logger.log_action('click', str(locator))
        # Script click, so overlays or off-screen positions do not intercept it
        try:
            self.driver.execute_script("arguments[0].click();", element)
        except StaleElementReferenceException as e:
            raise ElementNotFound(str(locator)) from e
        if self.click_delay:
            time.sleep(self.click_delay)

    def fill(self, locator: Locator, value: str):
        element = self._find(locator)
        element.clear()
        element.send_keys(value)

    def close(self):
        """Close browser cleanly."""
        try:
            self.driver.quit()
        except Exception as e:
            print(f"Warning: browser did not shut down cleanly: {e}")


def start_browser(config: BrowserConfiguration) -> webdriver.Chrome:
    """Start Chrome with the configured options."""
    options = Options()

    if config.headless:
        options.add_argument("--headless")
        options.add_argument("start-maximized")

    options.add_argument(f"--window-size={config.window_size[0]},{config.window_size[1]}")

    if config.user_agent:
        options.add_argument(f"--user-agent={config.user_agent}")

    if config.disable_images:
        options.add_experimental_option("prefs", {"profile.managed_default_content_settings.images": 2})

    if config.disable_dev_shm_usage:
        options.add_argument("--disable-dev-shm-usage")

    if config.disable_gpu:
        options.add_argument("--disable-gpu")

    if config.no_sandbox:
        options.add_argument("--no-sandbox")

    service = Service(config.webdriver_path) if config.webdriver_path else Service()
    driver = webdriver.Chrome(service=service, options=options)

    driver.set_page_load_timeout(config.page_load_timeout)
    driver.implicitly_wait(config.implicit_wait)

    return driver
