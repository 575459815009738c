"""ContextVar-based conversion options for formtree.

Provides thread-local configuration using Python's ContextVars (PEP 567).
Options are read by the converter whenever a call does not pass its own.

Thread Safety:
    ContextVars are thread-local by design. Each thread has independent storage,
    so no locks are needed.

Usage:
    # Explicit options always win
    ast = parse(source, options=ConvertOptions(retain_whitespace=True))

    # Or scope options for a block of calls
    with convert_options_context(ConvertOptions(retain_whitespace=True)):
        ast = parse(source)
        assert reconstruct(ast) == source

"""

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class ConvertOptions:
    """Immutable conversion options.

    Attributes:
        retain_whitespace: Keep whitespace (and zero-width adjacency markers)
            as Whitespace nodes, and record each token's source spelling
        retain_comments: Keep line comments as Comment nodes

    With both enabled, ``reconstruct(parse(source))`` reproduces the source
    exactly.

    """

    retain_whitespace: bool = False
    retain_comments: bool = False

    @classmethod
    def from_dict(cls, config_dict: Mapping[str, Any]) -> "ConvertOptions":
        """Create ConvertOptions from a mapping.

        Only includes keys that are valid ConvertOptions fields; unknown keys
        are silently ignored.

        Example:
            >>> options = ConvertOptions.from_dict({
            ...     "retain_whitespace": True,
            ...     "unknown_key": "ignored",
            ... })
            >>> options.retain_whitespace
            True

        """
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
        return cls(**filtered)

    @classmethod
    def lossless(cls) -> "ConvertOptions":
        """Options under which reconstruction reproduces the source exactly."""
        return cls(retain_whitespace=True, retain_comments=True)


# Module-level default options (reused, never recreated)
_DEFAULT_OPTIONS: ConvertOptions = ConvertOptions()

_convert_options: ContextVar[ConvertOptions] = ContextVar(
    "convert_options",
    default=_DEFAULT_OPTIONS,
)


def get_convert_options() -> ConvertOptions:
    """Get current conversion options (thread-local)."""
    return _convert_options.get()


def set_convert_options(options: ConvertOptions) -> None:
    """Set conversion options for the current context.

    Thread Safety:
        Only affects the current thread's context. Other threads are unaffected.

    """
    _convert_options.set(options)


def reset_convert_options() -> None:
    """Reset to the default options (nothing retained)."""
    _convert_options.set(_DEFAULT_OPTIONS)


@contextmanager
def convert_options_context(options: ConvertOptions) -> Iterator[None]:
    """Context manager for temporary option changes.

    Example:
        >>> with convert_options_context(ConvertOptions(retain_comments=True)):
        ...     ast = parse("; note\\n(f)")
        >>> # Automatically reset to previous options

    Thread Safety:
        Only affects the current thread's context. Properly restores previous
        options even if an exception is raised.

    """
    previous = _convert_options.get()
    _convert_options.set(options)
    try:
        yield
    finally:
        _convert_options.set(previous)


__all__ = [
    "ConvertOptions",
    "convert_options_context",
    "get_convert_options",
    "reset_convert_options",
    "set_convert_options",
]
