# statedump/errors.py
"""
Error types and reporting for statedump.

Resolution never aborts the caller.  Every failure is raised internally as
a ``ResolutionError`` subclass, caught at the component boundary, handed to
an ``ErrorReporter`` and replaced by the error's fallback value so that some
text is always produced.

Error Hierarchy:
────────────────
    StateDumpError (base)
    ├── ResolutionError
    │   ├── MissingArgument              SD-1001
    │   ├── UnsupportedMember            SD-1002
    │   ├── PropertyNotReadable          SD-1003
    │   ├── MethodHasParameters          SD-1004
    │   ├── MethodReturnsNothing         SD-1005
    │   ├── UnsupportedExpressionShape   SD-1006
    │   └── MemberAccessFailed           SD-1007
    └── ExpressionSyntaxError            SD-2001

Example Usage:
──────────────
    reporter = ErrorReporter()
    try:
        ...
    except ResolutionError as exc:
        reporter.report(exc)
        value = exc.fallback

    if reporter.has_errors():
        print(reporter.summary())
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, unique
from typing import Any, Dict, Iterator, List, Optional


# ═══════════════════════════════════════════════════════════════════════════════
# ERROR SEVERITY AND CLASSIFICATION
# ═══════════════════════════════════════════════════════════════════════════════

@unique
class ErrorSeverity(Enum):
    """Severity levels for reported diagnostics."""

    ERROR = "error"

    def log_level(self) -> int:
        """Map to the matching ``logging`` level."""
        return {ErrorSeverity.ERROR: logging.ERROR}[self]


@unique
class ErrorPhase(Enum):
    """Which stage produced the error."""

    PARSE = "parse"
    RESOLVE = "resolve"


# ═══════════════════════════════════════════════════════════════════════════════
# ERROR CODES
# ═══════════════════════════════════════════════════════════════════════════════

class ErrorCode:
    """
    Structured error code of the form ``SD-NNNN``.

    Ranges:
      - 1000-1999: resolution errors
      - 2000-2999: expression parse errors
    """

    __slots__ = ("number", "name", "phase", "default_severity")

    PREFIX = "SD"

    def __init__(
        self,
        number: int,
        name: str,
        phase: ErrorPhase,
        default_severity: ErrorSeverity = ErrorSeverity.ERROR,
    ) -> None:
        self.number = number
        self.name = name
        self.phase = phase
        self.default_severity = default_severity

    @property
    def code(self) -> str:
        return f"{self.PREFIX}-{self.number:04d}"

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"ErrorCode({self.code!r}, {self.name})"

    def __hash__(self) -> int:
        return hash(self.number)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ErrorCode):
            return self.number == other.number
        if isinstance(other, str):
            return self.code == other
        return False


class ErrorCodes:
    """Predefined error codes."""

    MISSING_ARGUMENT = ErrorCode(1001, "MissingArgument", ErrorPhase.RESOLVE)
    UNSUPPORTED_MEMBER = ErrorCode(1002, "UnsupportedMember", ErrorPhase.RESOLVE)
    PROPERTY_NOT_READABLE = ErrorCode(1003, "PropertyNotReadable", ErrorPhase.RESOLVE)
    METHOD_HAS_PARAMETERS = ErrorCode(1004, "MethodHasParameters", ErrorPhase.RESOLVE)
    METHOD_RETURNS_NOTHING = ErrorCode(1005, "MethodReturnsNothing", ErrorPhase.RESOLVE)
    UNSUPPORTED_EXPRESSION_SHAPE = ErrorCode(
        1006, "UnsupportedExpressionShape", ErrorPhase.RESOLVE
    )
    MEMBER_ACCESS_FAILED = ErrorCode(1007, "MemberAccessFailed", ErrorPhase.RESOLVE)

    EXPRESSION_SYNTAX = ErrorCode(2001, "ExpressionSyntaxError", ErrorPhase.PARSE)


# ═══════════════════════════════════════════════════════════════════════════════
# ERROR MESSAGES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class ErrorMessage:
    """
    A reported diagnostic.

    ``subject`` names what was being resolved (an expression label or a
    ``Type.member`` path) and is empty when unknown.
    """

    code: ErrorCode
    message: str
    subject: str = ""
    severity: Optional[ErrorSeverity] = None
    hint: str = ""

    def __post_init__(self) -> None:
        if self.severity is None:
            self.severity = self.code.default_severity

    def format(self) -> str:
        where = f"{self.subject}: " if self.subject else ""
        text = f"{where}{self.message} [{self.code}]"
        if self.hint:
            text += f" (hint: {self.hint})"
        return text

    def to_json(self) -> Dict[str, Any]:
        return {
            "code": self.code.code,
            "name": self.code.name,
            "message": self.message,
            "subject": self.subject,
            "severity": self.severity.value if self.severity else "error",
            "phase": self.code.phase.value,
            "hint": self.hint,
        }

    def __str__(self) -> str:
        return self.format()


# ═══════════════════════════════════════════════════════════════════════════════
# EXCEPTION CLASSES
# ═══════════════════════════════════════════════════════════════════════════════

class StateDumpError(Exception):
    """
    Base exception for all statedump errors.

    Carries an ``ErrorMessage`` and the value to display in place of the
    unresolved one.
    """

    code: ErrorCode = ErrorCodes.UNSUPPORTED_EXPRESSION_SHAPE

    def __init__(
        self,
        message: str,
        subject: str = "",
        fallback: Any = None,
        hint: str = "",
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.error_message = ErrorMessage(
            code=self.code, message=message, subject=subject, hint=hint
        )
        self.fallback = fallback
        self.cause = cause

    @property
    def subject(self) -> str:
        return self.error_message.subject

    def __str__(self) -> str:
        return self.error_message.format()


class ResolutionError(StateDumpError):
    """An expression or member could not be turned into a value."""


class MissingArgument(ResolutionError):
    """A node (or an instance owner) was required but absent."""

    code = ErrorCodes.MISSING_ARGUMENT


class UnsupportedMember(ResolutionError):
    """Member access reached something that is neither field nor property."""

    code = ErrorCodes.UNSUPPORTED_MEMBER


class PropertyNotReadable(ResolutionError):
    """Property has no getter."""

    code = ErrorCodes.PROPERTY_NOT_READABLE


class MethodHasParameters(ResolutionError):
    """Method needs arguments; only zero-argument calls are evaluated."""

    code = ErrorCodes.METHOD_HAS_PARAMETERS


class MethodReturnsNothing(ResolutionError):
    """Method is annotated ``-> None``."""

    code = ErrorCodes.METHOD_RETURNS_NOTHING


class UnsupportedExpressionShape(ResolutionError):
    """The object handed to the resolver is not an expression node."""

    code = ErrorCodes.UNSUPPORTED_EXPRESSION_SHAPE


class MemberAccessFailed(ResolutionError):
    """User code raised while a member was read or a method invoked."""

    code = ErrorCodes.MEMBER_ACCESS_FAILED


class ExpressionSyntaxError(StateDumpError):
    """Expression text could not be parsed or names an unknown variable."""

    code = ErrorCodes.EXPRESSION_SYNTAX


# ═══════════════════════════════════════════════════════════════════════════════
# ERROR REPORTER
# ═══════════════════════════════════════════════════════════════════════════════

class ErrorReporter:
    """
    Collects diagnostics for one call and forwards each to the
    ``statedump.errors`` logger.

    Diagnostics never reach the output sink, which only receives the
    rendered text.
    """

    def __init__(self, channel: Optional[logging.Logger] = None) -> None:
        self._messages: List[ErrorMessage] = []
        self._channel = channel or logging.getLogger("statedump.errors")

    def report(self, error: StateDumpError) -> None:
        msg = error.error_message
        self._messages.append(msg)
        self._channel.log(
            msg.severity.log_level(),
            "%s",
            msg.format(),
            exc_info=error.cause,
        )

    def has_errors(self) -> bool:
        return any(m.severity is ErrorSeverity.ERROR for m in self._messages)

    @property
    def messages(self) -> List[ErrorMessage]:
        return list(self._messages)

    def codes(self) -> List[str]:
        return [m.code.code for m in self._messages]

    def summary(self) -> str:
        return "\n".join(m.format() for m in self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[ErrorMessage]:
        return iter(self._messages)
