# statedump/render.py
"""
Value rendering.

``ValueRenderer.render`` is total: it returns text for every input and never
raises, since it is the last step before diagnostic output.
"""

from __future__ import annotations

import collections
import collections.abc
import logging
from typing import Any, List, Optional, Set

from termcolor import colored

from statedump.config import DEFAULT_CONFIG, FormatConfig

logger = logging.getLogger(__name__)

_TEXT_TYPES = (str, bytes, bytearray, memoryview, range)

# nesting deeper than this renders as the elision marker
MAX_DEPTH = 64


def _is_ordered_sequence(value: Any) -> bool:
    if isinstance(value, _TEXT_TYPES):
        return False
    if isinstance(value, tuple) and hasattr(value, "_fields"):
        # named tuples render by their own repr
        return False
    return isinstance(value, (list, tuple, collections.deque, collections.abc.Sequence))


def _default_text(value: Any) -> str:
    try:
        return str(value)
    except Exception:
        logger.debug("str() failed for %s", type(value).__name__, exc_info=True)
        return object.__repr__(value)


class ValueRenderer:
    """Renders values as text fragments according to a ``FormatConfig``."""

    def __init__(self, config: Optional[FormatConfig] = None) -> None:
        self.config = config or DEFAULT_CONFIG

    # ── tokens ───────────────────────────────────────────────────

    def paint(self, text: str, color: str) -> str:
        colorize = self.config.colorize
        if colorize is None:
            return colored(text, color)
        if colorize:
            return colored(text, color, force_color=True)
        return text

    @property
    def null_token(self) -> str:
        return self.paint(self.config.null_text, "red")

    def bool_token(self, flag: bool) -> str:
        if flag:
            return self.paint(self.config.true_text, "green")
        return self.paint(self.config.false_text, "red")

    # ── rendering ────────────────────────────────────────────────

    def render(self, value: Any) -> str:
        parts: List[str] = []
        self._render_into(value, parts, set(), 0)
        return "".join(parts)

    def _render_into(
        self, value: Any, out: List[str], active: Set[int], depth: int
    ) -> None:
        if value is None:
            out.append(self.null_token)
            return

        if isinstance(value, bool):
            out.append(self.bool_token(value))
            return

        if _is_ordered_sequence(value):
            if id(value) in active or depth >= MAX_DEPTH:
                out.append("[...]")
                return
            try:
                items = list(value)
            except Exception:
                logger.debug("cannot iterate %s", type(value).__name__, exc_info=True)
                out.append(_default_text(value))
                return
            if not items:
                out.append("[]")
                return
            active.add(id(value))
            out.append("[")
            for n, item in enumerate(items):
                if n:
                    out.append(self.config.single_row_separator)
                self._render_into(item, out, active, depth + 1)
            out.append("]")
            active.discard(id(value))
            return

        out.append(_default_text(value))

    def fragment(self, name: str, value: Any) -> str:
        """Render one ``name=value`` row."""
        return f"{name}{self.config.name_value_separator}{self.render(value)}"
