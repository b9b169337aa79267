"""
Exceptions raised while loading, parsing and rendering template pages.

All expected errors that should be displayed to the user as clean messages
(without stack traces) inherit from TemplatePagesError.

Programming errors and bugs should NOT inherit from TemplatePagesError;
they propagate with full tracebacks.
"""

from __future__ import annotations

from typing import Optional


class TemplatePagesError(Exception):
    """
    Base class for all user-facing errors of the template engine.

    These errors indicate problems that the template author can fix:
    malformed expressions, missing pages, unknown filters, bad configuration.
    """
    pass


class TemplateSyntaxError(TemplatePagesError):
    """Malformed delimiter or expression, reported with its source position."""

    def __init__(
        self,
        message: str,
        *,
        line: int = 0,
        column: int = 0,
        position: int = 0,
        page: Optional[str] = None,
    ):
        self.message = message
        self.line = line
        self.column = column
        self.position = position
        self.page = page
        super().__init__(self._format())

    def _format(self) -> str:
        where = f"{self.line}:{self.column}"
        if self.page:
            where = f"{self.page}:{where}"
        return f"{self.message} at {where}"

    def with_page(self, page: str, line_offset: int = 0, position_offset: int = 0) -> TemplateSyntaxError:
        """
        Returns a copy bound to the page the failing text came from.

        Offsets shift the position when the parsed text did not start at the
        beginning of the file (e.g. after front matter).
        """
        return TemplateSyntaxError(
            self.message,
            line=self.line + line_offset,
            column=self.column,
            position=self.position + position_offset,
            page=page,
        )


class TemplateNotFoundError(TemplatePagesError):
    """A page, partial or explicitly named layout does not exist."""

    def __init__(self, page: str, kind: str = "page"):
        self.page = page
        self.kind = kind
        super().__init__(f"Template {kind} not found: '{page}'")


class FilterError(TemplatePagesError):
    """Base class for errors tied to a specific filter."""

    def __init__(self, message: str, filter_name: str):
        self.filter_name = filter_name
        super().__init__(f"Filter '{filter_name}': {message}")


class UnknownFilterError(FilterError):
    def __init__(self, filter_name: str):
        super().__init__("unknown filter", filter_name)


class FilterArityError(FilterError):
    def __init__(self, filter_name: str, given: int, min_args: int, max_args: Optional[int]):
        self.given = given
        self.min_args = min_args
        self.max_args = max_args
        if max_args is None:
            expected = f"at least {min_args}"
        elif min_args == max_args:
            expected = str(min_args)
        else:
            expected = f"{min_args}..{max_args}"
        super().__init__(f"expected {expected} argument(s), got {given}", filter_name)


class FilterExecutionError(FilterError):
    """Failure raised inside a filter (type mismatch, bad argument value, ...)."""
    pass


class RenderDepthError(TemplatePagesError):
    """Nested partial/forEach composition exceeded the configured depth."""

    def __init__(self, max_depth: int, page: Optional[str] = None):
        self.max_depth = max_depth
        self.page = page
        suffix = f" while rendering '{page}'" if page else ""
        super().__init__(f"Maximum composition depth {max_depth} exceeded{suffix}")


class ConfigError(TemplatePagesError):
    """Invalid settings file or settings value."""
    pass


__all__ = [
    "TemplatePagesError",
    "TemplateSyntaxError",
    "TemplateNotFoundError",
    "FilterError",
    "UnknownFilterError",
    "FilterArityError",
    "FilterExecutionError",
    "RenderDepthError",
    "ConfigError",
]
