# sharedurl/core/errors.py
from __future__ import annotations


class SharedUrlError(Exception):
    pass


class NotFound(SharedUrlError):
    """A requested instance, course module or course does not exist."""


class NotAllowed(SharedUrlError):
    """The current user may not view the requested activity."""


class NotResolvable(SharedUrlError):
    """The stored URL does not point to a live activity on this site."""


class MalformedUrl(NotResolvable):
    pass


class InvalidInput(SharedUrlError):
    """Form validation failure, key is a language string."""

    def __init__(self, field: str, key: str):
        super().__init__(f"{field}: {key}")
        self.field = field
        self.key = key
