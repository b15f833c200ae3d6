"""In-memory stand-ins for Playwright's Page and Locator.

Elements live in a dict keyed by a string that mirrors how the locator was
built, e.g. ``testid=search-history >> //p`` or ``role=button[name=Login]``.
"""

import asyncio
import re
from dataclasses import dataclass, field
from typing import Callable

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from mercari_e2e.assertions import EDITABLE_VALUE_SCRIPT, SELECTED_VALUES_SCRIPT


def _k(value) -> str:
    if isinstance(value, re.Pattern):
        return f"/{value.pattern}/"
    return str(value)


@dataclass
class FakeElement:
    text: str = ""
    visible: bool = True
    value: str = ""
    checked: bool = False
    enabled: bool = True
    editable: bool = True
    attributes: dict = field(default_factory=dict)
    selected: list = field(default_factory=list)
    box: dict | None = field(default_factory=lambda: {"x": 10, "y": 10, "width": 100, "height": 20})
    on_click: Callable[[], None] | None = None


class FakeDom:
    def __init__(self):
        self.elements: dict[str, list[FakeElement]] = {}
        self.actions: list[tuple] = []
        self.page = None

    def add(self, key: str, *elements: FakeElement) -> list[FakeElement]:
        self.elements.setdefault(key, []).extend(elements or [FakeElement()])
        return self.elements[key]

    def remove(self, key: str) -> None:
        self.elements.pop(key, None)

    def get(self, key: str) -> list[FakeElement]:
        return self.elements.get(key, [])


class _Scope:
    """Builds locator keys the same way for pages, frames and locators."""

    dom: FakeDom

    def _prefix(self) -> str:
        return ""

    def locator(self, selector, has_text=None):
        key = selector.key if isinstance(selector, FakeLocator) else str(selector)
        if has_text is not None:
            key = f"{key}|has_text={_k(has_text)}"
        return FakeLocator(self.dom, self._prefix() + key)

    def get_by_role(self, role, name=None, exact=None):
        key = f"role={role}" + (f"[name={_k(name)}]" if name is not None else "")
        return FakeLocator(self.dom, self._prefix() + key)

    def get_by_text(self, text, exact=None):
        return FakeLocator(self.dom, self._prefix() + f"text={_k(text)}")

    def get_by_label(self, text, exact=None):
        return FakeLocator(self.dom, self._prefix() + f"label={_k(text)}")

    def get_by_placeholder(self, text, exact=None):
        return FakeLocator(self.dom, self._prefix() + f"placeholder={_k(text)}")

    def get_by_test_id(self, test_id):
        return FakeLocator(self.dom, self._prefix() + f"testid={_k(test_id)}")

    def frame_locator(self, selector):
        return FakeFrameLocator(self.dom, self._prefix() + selector)


class FakeFrameLocator(_Scope):
    def __init__(self, dom: FakeDom, frame: str):
        self.dom = dom
        self.frame = frame

    def _prefix(self) -> str:
        return f"{self.frame} >>> "


class FakeLocator(_Scope):
    def __init__(self, dom: FakeDom, key: str, pick=None):
        self.dom = dom
        self.key = key
        self.pick = pick

    def __repr__(self):
        return f"FakeLocator({self.key!r}, pick={self.pick!r})"

    def _prefix(self) -> str:
        return f"{self.key} >> "

    @property
    def page(self):
        return self.dom.page

    def _elements(self) -> list[FakeElement]:
        elements = self.dom.get(self.key)
        if self.pick is None or not elements:
            return elements
        if self.pick == "first":
            return elements[:1]
        if self.pick == "last":
            return elements[-1:]
        return elements[self.pick : self.pick + 1]

    async def _wait_one(self, timeout=None) -> FakeElement:
        """Auto-waits like Playwright: up to ``timeout`` ms, or the page default when None."""
        loop = asyncio.get_running_loop()
        budget = timeout if timeout else self.dom.page.default_timeout
        deadline = loop.time() + budget / 1000
        while True:
            elements = self._elements()
            if elements:
                return elements[0]
            remaining = deadline - loop.time()
            if remaining <= 0:
                raise PlaywrightTimeoutError(f"Timeout {budget}ms exceeded waiting for {self.key}")
            await asyncio.sleep(min(0.01, remaining))

    @property
    def first(self):
        return FakeLocator(self.dom, self.key, "first")

    @property
    def last(self):
        return FakeLocator(self.dom, self.key, "last")

    def nth(self, index: int):
        return FakeLocator(self.dom, self.key, index)

    async def count(self) -> int:
        return len(self._elements())

    async def all(self):
        return [FakeLocator(self.dom, self.key, i) for i in range(len(self.dom.get(self.key)))]

    async def is_visible(self, timeout=None) -> bool:
        elements = self._elements()
        return bool(elements) and elements[0].visible

    async def is_hidden(self, timeout=None) -> bool:
        return not await self.is_visible()

    async def is_checked(self, timeout=None) -> bool:
        return (await self._wait_one(timeout)).checked

    async def is_enabled(self, timeout=None) -> bool:
        return (await self._wait_one(timeout)).enabled

    async def is_disabled(self, timeout=None) -> bool:
        return not (await self._wait_one(timeout)).enabled

    async def is_editable(self, timeout=None) -> bool:
        return (await self._wait_one(timeout)).editable

    async def inner_text(self, timeout=None) -> str:
        return (await self._wait_one(timeout)).text

    async def text_content(self, timeout=None) -> str:
        return (await self._wait_one(timeout)).text

    async def all_inner_texts(self) -> list[str]:
        return [e.text for e in self._elements()]

    async def all_text_contents(self) -> list[str]:
        return [e.text for e in self._elements()]

    async def input_value(self, timeout=None) -> str:
        return (await self._wait_one(timeout)).value

    async def get_attribute(self, name, timeout=None):
        return (await self._wait_one(timeout)).attributes.get(name)

    async def bounding_box(self, timeout=None):
        return (await self._wait_one(timeout)).box

    async def evaluate(self, script, arg=None, timeout=None):
        element = await self._wait_one(timeout)
        if script == SELECTED_VALUES_SCRIPT:
            return list(element.selected)
        if script == EDITABLE_VALUE_SCRIPT:
            return element.value if element.editable else element.text
        raise NotImplementedError(script)

    async def wait_for(self, state="visible", timeout=None):
        if state in ("attached", "visible"):
            element = await self._wait_one(timeout)
            if state == "visible" and not element.visible:
                raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {self.key} to be visible")

    async def _act(self, name: str, *args, timeout=None) -> FakeElement:
        await asyncio.sleep(0)
        element = await self._wait_one(timeout)
        if not element.enabled:
            raise PlaywrightError(f"{name}: element is not enabled")
        self.dom.actions.append((name, self.key, *args))
        return element

    async def click(self, timeout=None, **kwargs):
        element = await self._act("click", timeout=timeout)
        if element.on_click:
            element.on_click()

    async def hover(self, timeout=None, **kwargs):
        await self._act("hover", timeout=timeout)

    async def fill(self, value, timeout=None, **kwargs):
        element = await self._act("fill", value, timeout=timeout)
        element.value = value

    async def clear(self, timeout=None, **kwargs):
        element = await self._act("clear", timeout=timeout)
        element.value = ""

    async def check(self, timeout=None, **kwargs):
        element = await self._act("check", timeout=timeout)
        element.checked = True

    async def uncheck(self, timeout=None, **kwargs):
        element = await self._act("uncheck", timeout=timeout)
        element.checked = False

    async def select_option(self, value=None, label=None, index=None, timeout=None):
        chosen = value if value is not None else label if label is not None else index
        element = await self._act("select", chosen, timeout=timeout)
        element.selected = list(chosen) if isinstance(chosen, list) else [chosen]
        return [str(v) for v in element.selected]


class FakeContext:
    def __init__(self):
        self.saved_to = None

    async def storage_state(self, path=None):
        self.saved_to = path
        return {"cookies": [], "origins": []}


class FakePage(_Scope):
    def __init__(self, url: str = "https://jp.mercari.com/", title: str = "メルカリ"):
        self.dom = FakeDom()
        self.dom.page = self
        self.url = url
        self._title = title
        self.viewport_size = {"width": 1600, "height": 1000}
        self.context = FakeContext()
        self.history: list[str] = []
        self.load_states: list[str] = []
        self.checkbox_states: list[dict] = []
        self.reload_navigates = True
        self.default_timeout = 20000
        self.screenshots: list[str] = []
        self.navigation_timeout = 30000
        self.closed = False
        self._waiters: dict[str, list[asyncio.Future]] = {}

    def waiting(self, event: str) -> int:
        return len(self._waiters.get(event, []))

    def emit(self, event: str, value=None) -> None:
        for future in list(self._waiters.get(event, [])):
            if not future.done():
                future.set_result(value)

    def navigate(self, url: str) -> None:
        self.history.append(self.url)
        self.url = url
        self.emit("framenavigated", url)

    def navigates_to(self, url: str) -> Callable[[], None]:
        return lambda: self.navigate(url)

    async def wait_for_event(self, event, timeout=None):
        future = asyncio.get_running_loop().create_future()
        self._waiters.setdefault(event, []).append(future)
        try:
            return await asyncio.wait_for(future, (timeout or 30000) / 1000)
        except asyncio.TimeoutError:
            raise PlaywrightTimeoutError(f'Timeout {timeout}ms exceeded while waiting for event "{event}"')
        finally:
            self._waiters[event].remove(future)

    async def wait_for_load_state(self, state=None, timeout=None):
        self.load_states.append(state)

    async def goto(self, url, wait_until=None, timeout=None):
        self.load_states.append(wait_until)
        self.navigate(url)
        return None

    async def reload(self, timeout=None, **kwargs):
        await asyncio.sleep(0)
        if self.reload_navigates:
            self.emit("framenavigated", self.url)

    async def go_back(self, timeout=None, **kwargs):
        await asyncio.sleep(0)
        previous = self.history.pop() if self.history else self.url
        self.url = previous
        self.emit("framenavigated", previous)

    async def title(self) -> str:
        return self._title

    async def eval_on_selector_all(self, selector, script, arg=None):
        return list(self.checkbox_states)

    def set_default_timeout(self, timeout: float) -> None:
        self.default_timeout = timeout

    def set_default_navigation_timeout(self, timeout: float) -> None:
        self.navigation_timeout = timeout

    async def close(self) -> None:
        self.closed = True

    async def screenshot(self, path=None, full_page=False, **kwargs) -> bytes:
        data = b"\x89PNG fake"
        if path:
            with open(path, "wb") as f:
                f.write(data)
            self.screenshots.append(str(path))
        return data
