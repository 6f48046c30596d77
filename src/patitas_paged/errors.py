"""Exception classes for patitas-paged.

Layout markers never abort a parse: scope mismatches degrade to output plus
a diagnostic. Exceptions are reserved for misuse of the public API, such as
an invalid configuration value.
"""

from __future__ import annotations

from patitas.errors import PatitasError


class PagedError(PatitasError):
    """Base exception for all patitas-paged errors."""

    pass


class LayoutConfigError(PagedError):
    """Invalid layout configuration.

    Raised by LayoutConfig.from_dict when an option has a non-boolean value.
    """

    def __init__(self, key: str, message: str) -> None:
        """Initialize config error.

        Args:
            key: Offending option name as supplied by the caller
            message: Description of the problem
        """
        self.key = key
        self.message = message
        super().__init__(f"Layout option '{key}': {message}")
