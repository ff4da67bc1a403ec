# tests/test_formatter.py
"""
Tests for ReflectiveStateFormatter: header, layout threshold, base-type
walking, boundary modules and the null-instance guard.
"""

from dataclasses import dataclass
from functools import cached_property

import pytest

from statedump.config import FormatConfig
from statedump.formatter import ReflectiveStateFormatter, layout_rows
from statedump.introspection import ScopePolicy
from statedump.render import ValueRenderer


@dataclass
class Point:
    x: int = 3
    y: int = 4


class FrameworkBase:
    framework_noise = "noise"

    def __init__(self):
        self.handle = 99


FrameworkBase.__module__ = "hostframework.core"


class Base(FrameworkBase):
    KIND = "base"

    def __init__(self):
        super().__init__()
        self.base_value = 1

    @property
    def base_prop(self):
        return "bp"


class Derived(Base):
    KIND = "derived"

    def __init__(self):
        super().__init__()
        self.derived_value = 2


class Lazy:
    def __init__(self):
        self.seed = 5

    @cached_property
    def area(self):
        return self.seed * 2


class Fragile:
    def __init__(self):
        self.ok = 1

    @property
    def bad(self):
        raise RuntimeError("nope")


@pytest.fixture
def formatter(provider, config, reporter):
    return ReflectiveStateFormatter(provider, ValueRenderer(config), config, reporter)


class TestEndToEnd:

    def test_point(self, formatter):
        text = formatter.format(Point, Point(), ScopePolicy.DEFAULT_INSTANCE)
        assert text == "Point state: x=3, y=4"

    def test_plain_class_point(self, formatter):
        class P:
            def __init__(self):
                self.x = 3
                self.y = 4

        P.__name__ = "Point"
        assert formatter.format(P, P(), ScopePolicy.DEFAULT_INSTANCE) == "Point state: x=3, y=4"

    def test_no_members(self, formatter):
        class Empty:
            pass

        assert formatter.format(Empty, Empty(), ScopePolicy.DEFAULT_INSTANCE) == "Empty state: "


class TestLayout:

    def test_under_threshold_is_single_line(self, formatter):
        text = formatter.format(Point, Point(), ScopePolicy.DEFAULT_INSTANCE)
        assert "\n" not in text

    def test_over_threshold_is_multi_line(self, provider, reporter):
        config = FormatConfig(max_line_length=10)
        f = ReflectiveStateFormatter(provider, ValueRenderer(config), config, reporter)
        text = f.format(Point, Point(), ScopePolicy.DEFAULT_INSTANCE)
        assert text == "Point state: \nx=3\ny=4"
        assert ", " not in text

    def test_exact_threshold(self):
        rows = ["a=1", "b=2"]
        multi_len = len("T state: \na=1\nb=2")
        at = FormatConfig(max_line_length=multi_len)
        below = FormatConfig(max_line_length=multi_len - 1)
        assert layout_rows(rows, at, "T state: ") == "T state: a=1, b=2"
        assert layout_rows(rows, below, "T state: ") == "T state: \na=1\nb=2"

    def test_long_values_split(self, formatter):
        @dataclass
        class Wide:
            a: str = "x" * 100
            b: str = "y" * 100

        text = formatter.format(Wide, Wide(), ScopePolicy.DEFAULT_INSTANCE)
        assert text.split("\n") == ["Wide state: ", "a=" + "x" * 100, "b=" + "y" * 100]

    def test_layout_without_header(self, config):
        assert layout_rows([], config) == ""
        assert layout_rows(["a=1", "b=2"], config) == "a=1, b=2"

    def test_newline_inside_value_collapses(self, formatter):
        @dataclass
        class Note:
            text: str = "a\nb"

        text = formatter.format(Note, Note(), ScopePolicy.DEFAULT_INSTANCE)
        assert text == "Note state: text=a, b"
        assert "\n" not in text

    def test_newline_inside_value_kept_when_split(self):
        config = FormatConfig(max_line_length=5)
        assert layout_rows(["text=a\nb"], config, "Note state: ") == "Note state: \ntext=a\nb"
        assert layout_rows(["text=a\nb", "n=1"], FormatConfig()) == "text=a, b, n=1"


class TestMembers:

    def test_cached_property_rendered_once(self, formatter):
        obj = Lazy()
        assert obj.area == 10
        text = formatter.format(Lazy, obj, ScopePolicy.DEFAULT_INSTANCE)
        assert text == "Lazy state: seed=5, area=10"
        assert text.count("area=") == 1

    def test_private_members(self, formatter):
        class Account:
            def __init__(self):
                self.owner = "kim"
                self._pin = 1234

        obj = Account()
        assert formatter.format(Account, obj, ScopePolicy.DEFAULT_INSTANCE) == "Account state: owner=kim"
        policy = ScopePolicy.from_options(include_private=True)
        assert formatter.format(Account, obj, policy) == "Account state: owner=kim, _pin=1234"

    def test_static_state_of_type(self, formatter):
        assert formatter.format(Derived, None, ScopePolicy.DEFAULT_STATIC) == "Derived state: KIND=derived"

    def test_instance_and_static(self, formatter):
        policy = ScopePolicy.from_options(include_static=True)
        text = formatter.format(Derived, Derived(), policy)
        assert text == "Derived state: handle=99, base_value=1, derived_value=2, KIND=derived"

    def test_failing_property_renders_null(self, formatter, reporter):
        text = formatter.format(Fragile, Fragile(), ScopePolicy.DEFAULT_INSTANCE)
        assert text == "Fragile state: ok=1, bad=null"
        assert reporter.codes() == ["SD-1007"]

    def test_sequence_values(self, formatter):
        @dataclass
        class Bag:
            items: list
            empty: tuple = ()

        assert formatter.format(Bag, Bag([1, None]), ScopePolicy.DEFAULT_INSTANCE) == (
            "Bag state: items=[1, null], empty=[]"
        )


class TestBaseWalking:

    def walk_policy(self):
        return ScopePolicy.DEFAULT_INSTANCE & ~ScopePolicy.DECLARED_ONLY

    def test_declared_only_stops_after_first_type(self, formatter):
        assert list(formatter.declaring_types(Derived, ScopePolicy.DEFAULT_INSTANCE)) == [Derived]

    def test_walk_stops_at_boundary_module(self, provider, reporter):
        config = FormatConfig(boundary_modules=("hostframework",))
        f = ReflectiveStateFormatter(provider, ValueRenderer(config), config, reporter)
        assert list(f.declaring_types(Derived, self.walk_policy())) == [Derived, Base]

    def test_walk_stops_at_object(self, formatter):
        assert list(formatter.declaring_types(Derived, self.walk_policy())) == [
            Derived, Base, FrameworkBase,
        ]

    def test_walked_members(self, provider, reporter):
        config = FormatConfig(boundary_modules=("hostframework",))
        f = ReflectiveStateFormatter(provider, ValueRenderer(config), config, reporter)
        policy = self.walk_policy() | ScopePolicy.STATIC
        text = f.format(Derived, Derived(), policy)
        assert text == (
            "Derived state: handle=99, base_value=1, derived_value=2, "
            "KIND=derived, KIND=base, base_prop=bp"
        )
        assert "noise" not in text

    def test_boundary_submodule_only(self):
        config = FormatConfig(boundary_modules=("hostframework",))
        assert config.is_boundary_module("hostframework")
        assert config.is_boundary_module("hostframework.core")
        assert not config.is_boundary_module("hostframeworks")
        assert not config.is_boundary_module(None)


class TestNullGuard:

    def test_none_instance_with_instance_policy(self, formatter):
        assert formatter.format(Point, None, ScopePolicy.DEFAULT_INSTANCE) == "null"

    def test_none_instance_reads_nothing(self, provider, config, reporter):
        class Spy:
            @property
            def touched(self):
                raise AssertionError("should not be read")

        f = ReflectiveStateFormatter(provider, ValueRenderer(config), config, reporter)
        assert f.format(Spy, None, ScopePolicy.DEFAULT_INSTANCE) == "null"
        assert len(reporter) == 0
