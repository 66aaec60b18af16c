"""
Error Taxonomy
==============
Exceptions shared by the model and app layers.

None of these is fatal to the application: fetch errors are logged and the
previous state is kept, malformed entries are dropped from the payload.
"""


class FontMapError(Exception):
    """Base class for all application specific errors."""


class ExternalFetchError(FontMapError):
    """The external boundary (session store, pipeline process) failed."""

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"{operation}: {message}")
        self.operation = operation


class MalformedDataError(FontMapError):
    """A payload parsed but does not have the expected shape."""

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(f"{key}: {message}" if key else message)
        self.key = key
