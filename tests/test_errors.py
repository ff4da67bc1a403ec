# tests/test_errors.py
"""Tests for error codes, messages and the ErrorReporter."""

import logging

from statedump.errors import (
    ErrorCode,
    ErrorCodes,
    ErrorPhase,
    ErrorReporter,
    ErrorSeverity,
    ExpressionSyntaxError,
    MethodHasParameters,
    MissingArgument,
    ResolutionError,
)


class TestErrorCode:

    def test_format(self):
        assert ErrorCodes.MISSING_ARGUMENT.code == "SD-1001"
        assert str(ErrorCodes.EXPRESSION_SYNTAX) == "SD-2001"

    def test_equality(self):
        assert ErrorCodes.METHOD_HAS_PARAMETERS == "SD-1004"
        assert ErrorCodes.METHOD_HAS_PARAMETERS != ErrorCodes.MISSING_ARGUMENT
        assert len({ErrorCodes.MISSING_ARGUMENT, ErrorCodes.MISSING_ARGUMENT}) == 1


class TestExceptions:

    def test_hierarchy(self):
        assert issubclass(MissingArgument, ResolutionError)
        assert not issubclass(ExpressionSyntaxError, ResolutionError)

    def test_message_and_fallback(self):
        exc = MethodHasParameters("takes 1", subject="Player.heal", fallback="desc", hint="drop it")
        assert str(exc) == "Player.heal: takes 1 [SD-1004] (hint: drop it)"
        assert exc.fallback == "desc"
        assert exc.subject == "Player.heal"

    def test_default_fallback_is_none(self):
        assert MissingArgument("no owner").fallback is None

    def test_to_json(self):
        data = MissingArgument("no owner", subject="x").error_message.to_json()
        assert data["code"] == "SD-1001"
        assert data["name"] == "MissingArgument"
        assert data["phase"] == "resolve"
        assert data["severity"] == "error"


class TestReporter:

    def test_collects_and_logs(self, caplog):
        reporter = ErrorReporter()
        with caplog.at_level(logging.ERROR, logger="statedump.errors"):
            reporter.report(MissingArgument("no owner", subject="hp"))
            reporter.report(ExpressionSyntaxError("bad text"))
        assert len(reporter) == 2
        assert reporter.has_errors()
        assert reporter.codes() == ["SD-1001", "SD-2001"]
        assert [r.getMessage() for r in caplog.records] == [
            "hp: no owner [SD-1001]",
            "bad text [SD-2001]",
        ]

    def test_cause_attached_as_exc_info(self, caplog):
        reporter = ErrorReporter()
        try:
            raise KeyError("k")
        except KeyError as cause:
            error = MissingArgument("wrapped", cause=cause)
        with caplog.at_level(logging.ERROR, logger="statedump.errors"):
            reporter.report(error)
        assert caplog.records[0].exc_info[0] is KeyError

    def test_custom_channel(self, caplog):
        channel = logging.getLogger("tests.channel")
        reporter = ErrorReporter(channel)
        with caplog.at_level(logging.ERROR, logger="tests.channel"):
            reporter.report(MissingArgument("x"))
        assert caplog.records[0].name == "tests.channel"

    def test_empty(self):
        reporter = ErrorReporter()
        assert not reporter.has_errors()
        assert reporter.summary() == ""
        assert list(reporter) == []
        assert all(m.severity is ErrorSeverity.ERROR for m in reporter.messages)


class TestClassification:

    def test_every_phase_has_codes(self):
        codes = [v for v in vars(ErrorCodes).values() if isinstance(v, ErrorCode)]
        assert {c.phase for c in codes} == set(ErrorPhase)

    def test_severity_maps_to_error_level(self):
        assert list(ErrorSeverity) == [ErrorSeverity.ERROR]
        assert ErrorSeverity.ERROR.log_level() == logging.ERROR
