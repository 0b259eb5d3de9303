"""
PepperPlate scraping: sign in, list every recipe, read each recipe page.

All page access goes through a browser.PageAccessor, so nothing here knows
about WebDriver.
"""

import base64
import re
import time
import urllib.request
from http.client import HTTPException
from enum import Enum
from typing import Callable, List, Optional
from urllib.error import URLError
from urllib.parse import urljoin

from selenium.webdriver.common.by import By

from browser import Locator, PageAccessor
from errors import AuthError, ElementNotFound, EnumerationError, ExtractionError
from models import Recipe, RecipeCollection


# ---------------- Page locators ----------------

EMAIL_FIELD = Locator(By.ID, 'cphMain_loginForm_tbEmail')
PASSWORD_FIELD = Locator(By.ID, 'cphMain_loginForm_tbPassword')
SUBMIT_LINK = Locator(By.ID, 'cphMain_loginForm_ibSubmit')
SIGN_OUT_LINK = Locator(By.LINK_TEXT, 'Sign Out')

RECIPE_COUNT = Locator(By.ID, 'reclistcount')
RECIPE_ITEMS = Locator(By.CSS_SELECTOR, 'div.item')
ITEM_LINK = Locator(By.TAG_NAME, 'a')
LOAD_MORE_LINK = Locator(By.ID, 'loadmorelink')

NAME_HEADING = Locator(By.TAG_NAME, 'h2')
SOURCE_LINK = Locator(By.CSS_SELECTOR, 'a.source')
DESCRIPTION = Locator(By.CSS_SELECTOR, 'p.desc')
SERVINGS = Locator(By.ID, 'cphMiddle_cphMain_lblYield')
PREP_TIME = Locator(By.ID, 'cphMiddle_cphMain_lblActiveTime')
CATEGORIES = Locator(By.TAG_NAME, 'span', within=Locator(By.ID, 'cphMiddle_cphMain_pnlTags'))
NOTES = Locator(By.ID, 'cphMiddle_cphMain_lblNotes')
PHOTO = Locator(By.ID, 'cphMiddle_cphMain_imgRecipeThumb')
INGREDIENTS = Locator(By.CSS_SELECTOR, 'li.item', within=Locator(By.CSS_SELECTOR, 'ul.inggroups'))
DIRECTIONS = Locator(By.CSS_SELECTOR, 'span.text', within=Locator(By.CSS_SELECTOR, 'ul.dirgroups'))

CATEGORY_SEPARATOR = ', '


class Authenticator:
    """Signs in to PepperPlate through the login form."""

    def __init__(self, page: PageAccessor, login_url: str):
        self.page = page
        self.login_url = login_url

    def sign_in(self, email: str, password: str):
        print('[PP] Signing in...')
        try:
            self.page.goto(self.login_url)
            self.page.fill(EMAIL_FIELD, email)
            self.page.fill(PASSWORD_FIELD, password)
            self.page.click(SUBMIT_LINK)
        except ElementNotFound as e:
            raise AuthError("invalid credentials or unreachable") from e

        if not self.page.exists(SIGN_OUT_LINK):
            raise AuthError("invalid credentials or unreachable")


class LoadState(Enum):
    """States of the listing loader."""
    COUNTING = "counting"
    LOADING = "loading"
    COMPLETE = "complete"
    STALLED = "stalled"


class RecipeEnumerator:
    """
    Collects the URL of every recipe in the listing.

    The listing shows a total count but renders recipes a page at a time, so
    "load more" is clicked until the rendered links cover the total. A click
    is followed by a re-read even when the trigger is gone, since the last
    batch can land after it disappears. A re-read that adds no new link is a
    stalled attempt and waits retry_delay; max_stalled_loads of those in a
    row, or max_clicks clicks in all, end the loop.
    """

    def __init__(self, page: PageAccessor, listing_url: str = "", max_clicks: int = 500,
                 max_stalled_loads: int = 3, retry_delay: float = 0):
        self.page = page
        self.listing_url = listing_url
        self.max_clicks = max_clicks
        self.max_stalled_loads = max_stalled_loads
        self.retry_delay = retry_delay
        self.state = LoadState.COUNTING

    def expected_count(self) -> int:
        text = self.page.find_text(RECIPE_COUNT)
        match = re.search(r'\d+', text) if text else None
        if match is None:
            raise EnumerationError("count unavailable")
        return int(match.group(0))

    def rendered_urls(self) -> List[str]:
        """Links of the recipe items currently rendered, duplicates included."""
        urls = []
        for item in self.page.get_all_matching(RECIPE_ITEMS):
            try:
                href = item.get_attribute('href', ITEM_LINK)
            except ElementNotFound:
                continue
            if href:
                urls.append(href)
        return urls

    def enumerate(self) -> List[str]:
        print('[PP] Loading recipe links...')
        self.state = LoadState.COUNTING
        if self.listing_url:
            self.page.goto(self.listing_url)

        expected = self.expected_count()
        # dict keeps first-seen order
        found = dict.fromkeys(self.rendered_urls())

        clicks = 0
        stalled = 0
        self.state = LoadState.LOADING
        while len(found) < expected:
            if clicks >= self.max_clicks or stalled >= self.max_stalled_loads:
                self.state = LoadState.STALLED
                break

            clicks += 1
            try:
                self.page.click(LOAD_MORE_LINK)
            except ElementNotFound:
                # Trigger gone: the last batch may still be rendering
                pass

            before = len(found)
            found.update(dict.fromkeys(self.rendered_urls()))
            if len(found) > before:
                stalled = 0
            else:
                stalled += 1
                if self.retry_delay:
                    time.sleep(self.retry_delay)

            print(f'[PP] Loaded [{len(found)}/{expected}]')

        if len(found) < expected:
            self.state = LoadState.STALLED
            raise EnumerationError(f"incomplete: got {len(found)} of {expected}")

        self.state = LoadState.COMPLETE
        return list(found)


def download_image(url: str, timeout: Optional[float] = None) -> bytes:
    """Download image from URL and return its raw bytes."""
    with urllib.request.urlopen(url, timeout=timeout) as response:
        return response.read()


class RecipeExtractor:
    """Reads one recipe page into a Recipe."""

    def __init__(self, page: PageAccessor, fetch_image: Callable[..., bytes] = download_image,
                 image_timeout: Optional[float] = None):
        self.page = page
        self.fetch_image = fetch_image
        self.image_timeout = image_timeout

    def _optional_text(self, locator: Locator) -> Optional[str]:
        text = self.page.find_text(locator)
        return text if text else None

    def extract(self, url: str) -> Recipe:
        self.page.goto(url)

        name = self._optional_text(NAME_HEADING)
        if name is None:
            raise ExtractionError("missing name")
        print(f'[PP] Reading "{name}"...')

        source = self._optional_text(SOURCE_LINK)
        source_url = self.page.find_attribute(SOURCE_LINK, 'href') if source else None
        if not source_url:
            source = source_url = None

        categories = self._optional_text(CATEGORIES)
        notes = self._optional_text(NOTES)

        return Recipe(
            name=name,
            source=source,
            source_url=source_url,
            description=self._optional_text(DESCRIPTION),
            servings=self._optional_text(SERVINGS),
            prep_time=self._optional_text(PREP_TIME),
            categories=split_categories(categories) if categories else None,
            notes=(notes,) if notes else None,
            photo=self._photo(url),
            ingredients=tuple(item.get_text() for item in self.page.get_all_matching(INGREDIENTS)),
            directions=tuple(step.get_text() for step in self.page.get_all_matching(DIRECTIONS)),
        )

    def _photo(self, page_url: str) -> Optional[str]:
        src = self.page.find_attribute(PHOTO, 'src')
        if not src:
            return None
        try:
            data = self.fetch_image(urljoin(page_url, src), timeout=self.image_timeout)
        except (URLError, HTTPException, OSError, ValueError) as e:
            raise ExtractionError("photo fetch failed") from e
        return base64.b64encode(data).decode('ascii')

    def extract_all(self, urls: List[str], collection: Optional[RecipeCollection] = None) -> RecipeCollection:
        """Extract every URL in order into collection and hand it back."""
        if collection is None:
            collection = RecipeCollection()
        print(f'[PP] Loaded {len(urls)} recipe links.')
        for url in urls:
            collection.append(self.extract(url))
        return collection


def split_categories(text: str) -> List[str]:
    """Split the tag line into category names, keeping their order."""
    return text.split(CATEGORY_SEPARATOR)
