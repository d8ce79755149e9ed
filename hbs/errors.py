"""
Exception taxonomy for the template engine.

All expected failures a host can react to inherit from HbsUserError, split by
remediation: a template that cannot be found or compiled, a render that failed
while walking the node tree, or a helper that raised.

Programming errors inside the engine itself propagate unwrapped.
"""

from __future__ import annotations

from typing import Optional


class HbsUserError(Exception):
    """Base class for all user-facing engine errors."""
    pass


class TemplateNotFoundError(HbsUserError):
    """Raised when a loader cannot locate a template source."""

    def __init__(self, location: str, searched: Optional[str] = None):
        self.location = location
        self.searched = searched
        msg = f"Template not found: '{location}'"
        if searched and searched != location:
            msg += f" (resolved to {searched})"
        super().__init__(msg)


class TemplateCompileError(HbsUserError):
    """Malformed template syntax, unterminated section or mismatched close tag."""

    def __init__(self, message: str, filename: str = "", line: int = 0, column: int = 0):
        self.message = message
        self.filename = filename
        self.line = line
        self.column = column
        where = f"{filename}:" if filename else ""
        super().__init__(f"{where}{line}:{column}: {message}")


class LexerError(TemplateCompileError):
    """Tag scanning failed (unclosed tag, bad delimiter switch)."""
    pass


class ParserError(TemplateCompileError):
    """Tag structure could not be assembled into a node tree."""
    pass


class TemplateRenderError(HbsUserError):
    """
    Runtime evaluation failure.

    Location is attached by the innermost node that sees the error, so a
    deeply nested failure still reports where it happened.
    """

    def __init__(self, message: str):
        self.message = message
        self.filename: Optional[str] = None
        self.line = 0
        self.column = 0
        super().__init__(message)

    def locate(self, filename: str, line: int, column: int) -> None:
        if self.filename is not None:
            return
        self.filename = filename
        self.line = line
        self.column = column
        self.args = (f"{filename}:{line}:{column}: {self.message}",)


class ScopeResolutionError(TemplateRenderError):
    """A parent-navigation path walked above the root scope."""

    def __init__(self, path: str, depth: int):
        self.path = path
        self.depth = depth
        super().__init__(
            f"Path '{path}' navigates {depth} scope(s) up, beyond the root scope"
        )


class HelperNotFoundError(TemplateRenderError):
    """A tag with parameters names a helper that is not registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Could not find helper: '{name}'")


class MissingValueError(TemplateRenderError):
    """A reference resolved to nothing while strict mode is on."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Missing value for '{name}'")


class HelperError(TemplateRenderError):
    """A helper raised while executing; the original exception is the cause."""

    def __init__(self, helper_name: str, cause: BaseException):
        self.helper_name = helper_name
        self.cause = cause
        super().__init__(f"Helper '{helper_name}' failed: {cause}")


__all__ = [
    "HbsUserError",
    "TemplateNotFoundError",
    "TemplateCompileError",
    "LexerError",
    "ParserError",
    "TemplateRenderError",
    "ScopeResolutionError",
    "HelperNotFoundError",
    "MissingValueError",
    "HelperError",
]
