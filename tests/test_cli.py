# tests/test_cli.py
"""
Tests for the ``statedump`` command line.
"""

import textwrap

import pytest

from statedump.__main__ import EXIT_ERROR, EXIT_INFRA, EXIT_OK, build_parser, main

SAMPLE = textwrap.dedent('''
    class Settings:
        DEBUG = False
        _TOKEN = "t0k3n"
        RETRIES = 3


    class Engine:
        def __init__(self):
            self.rpm = 900
            self.parts = ["piston", None]
            self._serial = "E-1"

        @property
        def broken(self):
            raise RuntimeError("sensor offline")


    class Car:
        WHEELS = 4

        def __init__(self):
            self.engine = Engine()
            self.model = "roadster"


    car = Car()
    engine = car.engine
''')


@pytest.fixture
def sample_module(tmp_path, monkeypatch):
    (tmp_path / "cli_sample.py").write_text(SAMPLE)
    monkeypatch.syspath_prepend(str(tmp_path))
    return "cli_sample"


def run(capsys, *argv):
    code = main(["--color", "never", *argv])
    return code, capsys.readouterr().out


class TestValue:

    def test_expressions(self, sample_module, capsys):
        code, out = run(capsys, "value", sample_module, "car.model", "car.engine.rpm")
        assert code == EXIT_OK
        assert out == "model=roadster, rpm=900\n"

    def test_sequence_and_null(self, sample_module, capsys):
        code, out = run(capsys, "value", sample_module, "engine.parts")
        assert code == EXIT_OK
        assert out == "parts=[piston, null]\n"

    def test_unknown_member_exits_with_error(self, sample_module, capsys):
        code, out = run(capsys, "value", sample_module, "car.colour")
        assert code == EXIT_ERROR
        assert out == "colour=null\n"

    def test_max_line_splits_rows(self, sample_module, capsys):
        code, out = run(capsys, "--max-line", "10", "value", sample_module, "car.model", "car.WHEELS")
        assert code == EXIT_OK
        assert out == "model=roadster\nWHEELS=4\n"

    def test_missing_module(self, capsys):
        code, out = run(capsys, "value", "no_such_module_here", "x")
        assert code == EXIT_INFRA
        assert out == ""


class TestState:

    def test_instance(self, sample_module, capsys):
        code, out = run(capsys, "state", f"{sample_module}:car")
        assert code == EXIT_OK
        assert out.startswith("Car state: engine=")
        assert "model=roadster" in out

    def test_instance_with_failing_property(self, sample_module, capsys):
        code, out = run(capsys, "state", f"{sample_module}:engine", "--private")
        assert code == EXIT_ERROR
        assert out == "Engine state: rpm=900, parts=[piston, null], _serial=E-1, broken=null\n"

    def test_class_renders_static_state(self, sample_module, capsys):
        code, out = run(capsys, "state", f"{sample_module}:Settings")
        assert code == EXIT_OK
        assert out == "Settings state: DEBUG=False, RETRIES=3\n"

    def test_class_private(self, sample_module, capsys):
        code, out = run(capsys, "state", f"{sample_module}:Settings", "--private")
        assert out == "Settings state: DEBUG=False, _TOKEN=t0k3n, RETRIES=3\n"

    def test_static_with_instance(self, sample_module, capsys):
        code, out = run(capsys, "state", f"{sample_module}:car", "--static")
        assert out.rstrip().endswith("WHEELS=4")

    def test_dotted_target(self, sample_module, capsys):
        code, out = run(capsys, "state", f"{sample_module}:car.engine")
        assert out.startswith("Engine state: rpm=900")

    @pytest.mark.parametrize("target", ["nocolon", ":car", "cli_sample:", "cli_sample:nothing"])
    def test_bad_targets(self, sample_module, capsys, target):
        code, out = run(capsys, "state", target)
        assert code == EXIT_INFRA
        assert out == ""


class TestParser:

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_defaults(self):
        args = build_parser().parse_args(["state", "m:x"])
        assert args.verbose == 0
        assert args.color is None
        assert not (args.private or args.static or args.walk_bases)

    def test_verbosity(self):
        args = build_parser().parse_args(["-vv", "value", "m", "x"])
        assert args.verbose == 2
        assert args.expressions == ["x"]
