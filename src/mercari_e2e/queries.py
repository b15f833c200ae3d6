import re
from dataclasses import dataclass
from typing import Any, Union

from playwright.async_api import Locator


TextLike = Union[str, re.Pattern]


def _show(value: Any) -> str:
    if isinstance(value, re.Pattern):
        return f"/{value.pattern}/"
    return repr(value)


@dataclass(frozen=True)
class Selector:
    """A raw CSS or XPath selector, re-resolved against the live page on every use."""

    selector: str
    has_text: TextLike | None = None

    def __str__(self) -> str:
        if self.has_text is not None:
            return f"locator({self.selector!r}, has_text={_show(self.has_text)})"
        return f"locator({self.selector!r})"


@dataclass(frozen=True)
class ByRole:
    role: str
    name: TextLike | None = None
    exact: bool | None = None

    def options(self) -> dict:
        opts = {}
        if self.name is not None:
            opts["name"] = self.name
        if self.exact is not None:
            opts["exact"] = self.exact
        return opts

    def __str__(self) -> str:
        if self.name is not None:
            return f"get_by_role({self.role!r}, name={_show(self.name)})"
        return f"get_by_role({self.role!r})"


@dataclass(frozen=True)
class ByText:
    text: TextLike
    exact: bool | None = None

    def __str__(self) -> str:
        return f"get_by_text({_show(self.text)})"


@dataclass(frozen=True)
class ByLabel:
    text: TextLike
    exact: bool | None = None

    def __str__(self) -> str:
        return f"get_by_label({_show(self.text)})"


@dataclass(frozen=True)
class ByPlaceholder:
    text: TextLike
    exact: bool | None = None

    def __str__(self) -> str:
        return f"get_by_placeholder({_show(self.text)})"


@dataclass(frozen=True)
class ByTestId:
    test_id: TextLike
    # Overrides the configured test id attribute for this query only.
    attribute: str | None = None

    def __str__(self) -> str:
        if self.attribute:
            return f"get_by_test_id({_show(self.test_id)}, attribute={self.attribute!r})"
        return f"get_by_test_id({_show(self.test_id)})"


@dataclass(frozen=True)
class Handle:
    """An already resolved locator, passed through untouched."""

    locator: Locator

    def __str__(self) -> str:
        return str(self.locator)


@dataclass(frozen=True)
class InFrame:
    frame: str
    target: "Query"

    def __str__(self) -> str:
        return f"frame_locator({self.frame!r}) >> {self.target}"


Query = Union[Selector, ByRole, ByText, ByLabel, ByPlaceholder, ByTestId, Handle, InFrame]
QueryLike = Union[Query, str, Locator]

QUERY_TYPES = (Selector, ByRole, ByText, ByLabel, ByPlaceholder, ByTestId, Handle, InFrame)


def as_query(value: QueryLike) -> Query:
    """Coerce a string selector or a resolved locator into a tagged query."""
    if isinstance(value, QUERY_TYPES):
        return value
    if isinstance(value, str):
        return Selector(value)
    if value is None:
        raise TypeError("A query is required, got None")
    return Handle(value)


def describe(value: QueryLike) -> str:
    return str(as_query(value))
