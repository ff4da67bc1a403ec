# statedump/sinks.py
"""
Output sinks.

A sink receives each finished block of text together with optional
``context`` metadata (typically the object the text describes).
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional, Protocol, TextIO, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class OutputSink(Protocol):
    """Receives rendered text."""

    def emit(self, text: str, context: Any = None) -> None: ...


class LoggingSink:
    """Logs each text block on the ``statedump.output`` logger.

    ``context`` travels in the record's ``extra`` as ``record.context``.
    """

    def __init__(
        self, logger_: Optional[logging.Logger] = None, level: int = logging.INFO
    ) -> None:
        self.logger = logger_ or logging.getLogger("statedump.output")
        self.level = level

    def emit(self, text: str, context: Any = None) -> None:
        self.logger.log(self.level, "%s", text, extra={"context": context})


class StreamSink:
    """Writes one block per line to a text stream (``sys.stdout`` by default)."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def emit(self, text: str, context: Any = None) -> None:
        self.stream.write(text + "\n")
        self.stream.flush()


class NullSink:
    """Discards everything; stands in for a disabled build."""

    def emit(self, text: str, context: Any = None) -> None:
        return None
