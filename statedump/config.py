# statedump/config.py
"""
Formatting configuration.

``FormatConfig`` is immutable and passed explicitly to the renderer and the
formatter; there are no process-wide formatting constants.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

_TRUE = frozenset({"1", "true", "yes", "on", "always"})
_FALSE = frozenset({"0", "false", "no", "off", "never"})


@dataclass(frozen=True)
class FormatConfig:
    """Separators, layout threshold and colour policy for rendered text.

    Attributes
    ----------
    max_line_length:
        Rendered text up to this many characters is collapsed onto one line.
    colorize:
        ``True`` forces ANSI colour, ``False`` disables it, ``None`` lets
        termcolor decide from the environment and the terminal.
    boundary_modules:
        Base-type walking stops at classes defined in one of these modules
        (or a submodule of one).
    """

    max_line_length: int = 175
    name_value_separator: str = "="
    name_state_separator: str = " state: "
    single_row_separator: str = ", "
    multi_row_separator: str = "\n"
    const_label: str = "const"
    lambda_label: str = "lambda"
    null_text: str = "null"
    true_text: str = "True"
    false_text: str = "False"
    colorize: Optional[bool] = False
    boundary_modules: Tuple[str, ...] = ("builtins", "abc", "typing", "enum")

    def __post_init__(self) -> None:
        if self.max_line_length < 0:
            raise ValueError(
                f"max_line_length must be >= 0, got {self.max_line_length}"
            )

    def with_overrides(self, **changes) -> "FormatConfig":
        return replace(self, **changes)

    def is_boundary_module(self, module: Optional[str]) -> bool:
        if not module:
            return False
        for boundary in self.boundary_modules:
            if module == boundary or module.startswith(boundary + "."):
                return True
        return False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "FormatConfig":
        """Build a config from ``STATEDUMP_*`` environment variables.

        ``STATEDUMP_COLOR``           ``1``/``0``/``auto``
        ``STATEDUMP_MAX_LINE``        integer threshold
        ``STATEDUMP_BOUNDARY_MODULES`` comma-separated module names
        """
        env = os.environ if environ is None else environ
        changes = {}

        color = env.get("STATEDUMP_COLOR")
        if color is not None:
            flag = color.strip().lower()
            if flag in _TRUE:
                changes["colorize"] = True
            elif flag in _FALSE:
                changes["colorize"] = False
            elif flag == "auto":
                changes["colorize"] = None
            else:
                logger.warning("ignoring STATEDUMP_COLOR=%r", color)

        max_line = env.get("STATEDUMP_MAX_LINE")
        if max_line is not None:
            try:
                limit = int(max_line)
            except ValueError:
                limit = -1
            if limit >= 0:
                changes["max_line_length"] = limit
            else:
                logger.warning("ignoring STATEDUMP_MAX_LINE=%r", max_line)

        boundaries = env.get("STATEDUMP_BOUNDARY_MODULES")
        if boundaries is not None:
            changes["boundary_modules"] = tuple(
                m.strip() for m in boundaries.split(",") if m.strip()
            )

        return cls(**changes)


DEFAULT_CONFIG = FormatConfig()
