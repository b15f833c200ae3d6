from typing import Any


class E2EError(Exception):
    """Base class for errors raised by the helper layer."""


class ElementNotFoundError(E2EError):
    """Raised when a query cannot be resolved to anything on the page."""


class FrameNotFoundError(ElementNotFoundError):
    """Raised when the iframe a query is scoped to cannot be located."""

    def __init__(self, frame: str, timeout: int):
        super().__init__(f"Frame '{frame}' was not attached within {timeout}ms")
        self.frame = frame
        self.timeout = timeout


class E2ETimeoutError(E2EError, TimeoutError):
    """An element, action or navigation did not reach the desired state in time."""


class ActionTimeoutError(E2ETimeoutError):
    def __init__(self, action: str, target: str, cause: Exception | None = None):
        detail = f": {cause}" if cause else ""
        super().__init__(f"{action} on {target} timed out{detail}")
        self.action = action
        self.target = target


class NavigationTimeoutError(E2ETimeoutError):
    def __init__(self, trigger: str, timeout: int, cause: Exception | None = None):
        detail = f": {cause}" if cause else ""
        super().__init__(f"No navigation after {trigger} within {timeout}ms{detail}")
        self.trigger = trigger
        self.timeout = timeout


class ActionFailureError(E2EError):
    """The target rejected an action, e.g. a disabled or detached element."""

    def __init__(self, action: str, target: str, cause: Exception | None = None):
        detail = f": {cause}" if cause else ""
        super().__init__(f"{action} on {target} failed{detail}")
        self.action = action
        self.target = target


class ExpectationError(AssertionError):
    """A polled assertion that never held within its timeout."""

    def __init__(
        self,
        condition: str,
        target: str,
        expected: Any,
        received: Any,
        timeout: int,
        message: str | None = None,
    ):
        self.condition = condition
        self.target = target
        self.expected = expected
        self.received = received
        self.timeout = timeout
        self.message = message
        super().__init__(self._render())

    def _render(self) -> str:
        lines = [self.message or f"Expected {self.target} to satisfy '{self.condition}'"]
        lines.append(f"  Locator: {self.target}")
        lines.append(f"  Expected: {self.expected!r}")
        lines.append(f"  Received: {self.received!r}")
        lines.append(f"  Timeout: {self.timeout}ms")
        return "\n".join(lines)


class SoftAssertionsError(AssertionError):
    def __init__(self, errors: list[ExpectationError]):
        self.errors = list(errors)
        details = "\n\n".join(str(e) for e in self.errors)
        super().__init__(f"{len(self.errors)} soft assertion(s) failed:\n\n{details}")
