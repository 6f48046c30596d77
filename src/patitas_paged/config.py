"""ContextVar-based layout configuration.

Follows the same pattern as patitas' ParseConfig: an immutable config object
set per context and read by the scope transform.

Usage:
    # Explicit config
    result = rewrite(nodes, LayoutConfig(implicit_page=False))

    # Or set it for a block of work
    with layout_config_context(LayoutConfig(prefer_pages_in_spreads=True)):
        result = rewrite(nodes)

Thread Safety:
    ContextVars are thread-local by design. Each thread has independent storage.

"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, fields
from typing import Any, Iterator

from patitas_paged.errors import LayoutConfigError

# camelCase option names accepted alongside the field names
_ALIASES: dict[str, str] = {
    "implicitPage": "implicit_page",
    "preferPagesInSpreads": "prefer_pages_in_spreads",
    "warnOnBreakWithoutScope": "warn_on_break_without_scope",
}


@dataclass(frozen=True, slots=True)
class LayoutConfig:
    """Immutable layout marker options.

    Attributes:
        implicit_page: Wrap a @section with no open page in page "auto"
        prefer_pages_in_spreads: Warn when a @page opens outside a spread
        warn_on_break_without_scope: Warn when @break has nothing to close

    """

    implicit_page: bool = True
    prefer_pages_in_spreads: bool = False
    warn_on_break_without_scope: bool = True

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> LayoutConfig:
        """Create LayoutConfig from a dictionary.

        Keys may be field names or their camelCase forms
        (``implicitPage``, ``preferPagesInSpreads``,
        ``warnOnBreakWithoutScope``). Unknown keys are silently ignored.

        Raises:
            LayoutConfigError: If a recognized option is not a bool.

        Example:
            >>> LayoutConfig.from_dict({"implicitPage": False}).implicit_page
            False

        """
        valid_fields = {f.name for f in fields(cls)}
        filtered: dict[str, bool] = {}
        for key, value in config_dict.items():
            name = _ALIASES.get(key, key)
            if name not in valid_fields:
                continue
            if not isinstance(value, bool):
                raise LayoutConfigError(key, f"expected a bool, got {type(value).__name__}")
            filtered[name] = value
        return cls(**filtered)


_DEFAULT_CONFIG: LayoutConfig = LayoutConfig()

_layout_config: ContextVar[LayoutConfig] = ContextVar(
    "layout_config",
    default=_DEFAULT_CONFIG,
)


def get_layout_config() -> LayoutConfig:
    """Get the active layout configuration for this context."""
    return _layout_config.get()


def set_layout_config(config: LayoutConfig) -> None:
    """Set layout configuration for the current context."""
    _layout_config.set(config)


def reset_layout_config() -> None:
    """Reset to the module-level default configuration."""
    _layout_config.set(_DEFAULT_CONFIG)


@contextmanager
def layout_config_context(config: LayoutConfig) -> Iterator[None]:
    """Context manager for temporary config changes.

    Restores the previous config even if an exception is raised.

    Example:
        >>> with layout_config_context(LayoutConfig(implicit_page=False)):
        ...     get_layout_config().implicit_page
        False

    """
    previous = _layout_config.get()
    _layout_config.set(config)
    try:
        yield
    finally:
        _layout_config.set(previous)


__all__ = [
    "LayoutConfig",
    "get_layout_config",
    "layout_config_context",
    "reset_layout_config",
    "set_layout_config",
]
