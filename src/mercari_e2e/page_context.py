from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from typing import Iterator

from playwright.async_api import Page

from .errors import ExpectationError


@dataclass
class PageSession:
    """The page a test drives plus the soft assertion failures it has collected."""

    page: Page
    soft_errors: list[ExpectationError] = field(default_factory=list)


_session: ContextVar[PageSession | None] = ContextVar("mercari_e2e_session", default=None)


def bind_page(page: Page) -> Token:
    return _session.set(PageSession(page=page))


def release(token: Token) -> None:
    _session.reset(token)


@contextmanager
def page_session(page: Page) -> Iterator[PageSession]:
    token = bind_page(page)
    try:
        yield _session.get()
    finally:
        release(token)


def get_session() -> PageSession:
    session = _session.get()
    if session is None:
        raise RuntimeError("No page is bound to the current test; use the bound_page fixture or page_session()")
    return session


def get_page() -> Page:
    return get_session().page


def soft_errors() -> list[ExpectationError]:
    return get_session().soft_errors
