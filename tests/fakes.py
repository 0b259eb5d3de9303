from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set, Tuple

from browser import ElementHandle, Locator, PageAccessor
from errors import ElementNotFound
import pepperplate as pp


LOGIN_URL = "https://www.pepperplate.com/login.aspx"
LISTING_URL = "https://www.pepperplate.com/recipes/default.aspx"


class FakeElement(ElementHandle):
    def __init__(self, text: str = "", attributes: Optional[dict] = None,
                 children: Optional[Dict[Locator, "FakeElement"]] = None):
        self.text = text
        self.attributes = attributes or {}
        self.children = children or {}

    def _resolve(self, locator):
        if locator is None:
            return self
        try:
            return self.children[locator]
        except KeyError:
            raise ElementNotFound(str(locator))

    def get_text(self, locator=None):
        return self._resolve(locator).text

    def get_attribute(self, name, locator=None):
        return self._resolve(locator).attributes.get(name)


def recipe_item(url: str) -> FakeElement:
    """A listing tile linking to url."""
    return FakeElement(children={pp.ITEM_LINK: FakeElement(attributes={"href": url})})


@dataclass
class FakeDom:
    texts: Dict[Locator, str] = field(default_factory=dict)
    attributes: Dict[Tuple[Locator, str], str] = field(default_factory=dict)
    lists: Dict[Locator, List[FakeElement]] = field(default_factory=dict)
    present: Set[Locator] = field(default_factory=set)

    def has(self, locator: Locator) -> bool:
        return (
            locator in self.texts
            or locator in self.present
            or any(loc == locator for loc, _ in self.attributes)
        )


class FakePage(PageAccessor):
    """In-memory stand-in for a browser: url -> FakeDom."""

    def __init__(self, pages: Optional[Dict[str, FakeDom]] = None):
        self.pages = pages or {}
        self.url: Optional[str] = None
        self.visited: List[str] = []
        self.clicks: List[Locator] = []
        self.filled: Dict[Locator, str] = {}
        self.on_click: Dict[Locator, Callable[["FakePage"], None]] = {}

    @property
    def dom(self) -> FakeDom:
        return self.pages.setdefault(self.url, FakeDom())

    def goto(self, url):
        self.url = url
        self.visited.append(url)

    def get_text(self, locator):
        try:
            return self.dom.texts[locator]
        except KeyError:
            raise ElementNotFound(str(locator))

    def exists(self, locator):
        return self.dom.has(locator)

    def get_attribute(self, locator, name):
        if not self.dom.has(locator):
            raise ElementNotFound(str(locator))
        return self.dom.attributes.get((locator, name))

    def get_all_matching(self, locator):
        return list(self.dom.lists.get(locator, []))

    def click(self, locator):
        if not self.dom.has(locator):
            raise ElementNotFound(str(locator))
        self.clicks.append(locator)
        handler = self.on_click.get(locator)
        if handler is not None:
            handler(self)

    def fill(self, locator, value):
        if not self.dom.has(locator):
            raise ElementNotFound(str(locator))
        self.filled[locator] = value


def add_login(page: FakePage, email: str = "cook@example.com", password: str = "s3cret",
              landing_url: str = LISTING_URL) -> FakePage:
    """Login form that lands on landing_url showing "Sign Out" when credentials match."""
    page.pages[LOGIN_URL] = FakeDom(present={pp.EMAIL_FIELD, pp.PASSWORD_FIELD, pp.SUBMIT_LINK})

    def submit(p: FakePage):
        if p.filled.get(pp.EMAIL_FIELD) == email and p.filled.get(pp.PASSWORD_FIELD) == password:
            p.url = landing_url
            p.dom.present.add(pp.SIGN_OUT_LINK)

    page.on_click[pp.SUBMIT_LINK] = submit
    return page


def add_listing(page: FakePage, urls: List[str], batch: int = 20, total: Optional[int] = None,
                count_text: Optional[str] = None, repeat_last: bool = False,
                url: str = LISTING_URL) -> FakePage:
    """
    Listing that renders batch items and one more batch per "load more" click.

    The trigger disappears once every url is rendered. repeat_last renders the
    final tile twice, like the live DOM does while a batch is loading.
    """
    total = len(urls) if total is None else total
    dom = page.pages.setdefault(url, FakeDom())
    dom.texts[pp.RECIPE_COUNT] = f"You have {total} recipes" if count_text is None else count_text
    shown = {"n": min(batch, len(urls))}

    def render():
        items = [recipe_item(u) for u in urls[:shown["n"]]]
        if repeat_last and items:
            items.append(recipe_item(urls[shown["n"] - 1]))
        dom.lists[pp.RECIPE_ITEMS] = items
        if shown["n"] < len(urls):
            dom.present.add(pp.LOAD_MORE_LINK)
        else:
            dom.present.discard(pp.LOAD_MORE_LINK)

    def load_more(p: FakePage):
        shown["n"] = min(shown["n"] + batch, len(urls))
        render()

    render()
    page.on_click[pp.LOAD_MORE_LINK] = load_more
    return page


def recipe_dom(name: Optional[str] = "Tomato Soup", **fields) -> FakeDom:
    """Recipe detail page. Keyword fields mirror Recipe keys; omitted ones are not rendered."""
    dom = FakeDom()
    if name is not None:
        dom.texts[pp.NAME_HEADING] = name
    if "source" in fields:
        dom.texts[pp.SOURCE_LINK] = fields["source"]
        dom.attributes[(pp.SOURCE_LINK, "href")] = fields.get("source_url", "")
    for key, locator in (("description", pp.DESCRIPTION), ("servings", pp.SERVINGS),
                         ("prep_time", pp.PREP_TIME), ("categories", pp.CATEGORIES),
                         ("notes", pp.NOTES)):
        if key in fields:
            dom.texts[locator] = fields[key]
    if "photo_src" in fields:
        dom.attributes[(pp.PHOTO, "src")] = fields["photo_src"]
    dom.lists[pp.INGREDIENTS] = [FakeElement(text=t) for t in fields.get("ingredients", [])]
    dom.lists[pp.DIRECTIONS] = [FakeElement(text=t) for t in fields.get("directions", [])]
    return dom
