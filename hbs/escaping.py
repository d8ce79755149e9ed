"""Output escaping strategies applied to `{{var}}` tags."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class EscapingStrategy(Protocol):
    def escape(self, text: str) -> str:
        ...


class HtmlEscaping:
    """Escapes the characters Handlebars escapes: & < > " ' ` ="""

    _TABLE = str.maketrans({
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#x27;",
        "`": "&#x60;",
        "=": "&#x3D;",
    })

    def escape(self, text: str) -> str:
        return text.translate(self._TABLE)


class NoEscaping:
    def escape(self, text: str) -> str:
        return text


HTML_ESCAPING = HtmlEscaping()
NO_ESCAPING = NoEscaping()


__all__ = ["EscapingStrategy", "HtmlEscaping", "NoEscaping", "HTML_ESCAPING", "NO_ESCAPING"]
