# statedump/runtime.py
"""
statedump runtime façade.

Two call shapes:

* ``value`` / ``values`` — render one or more expressions as ``name=value``;
* ``state`` / ``state_of_type`` — render the members of an object or type.

Each call builds its own reporter, resolver and formatter; nothing is
shared between calls.  The ``format_*`` functions return the text, the
others hand it to an ``OutputSink`` (``LoggingSink`` unless one is given).
None of them raise: resolution problems go to the ``statedump.errors``
logger and a failing sink is logged and ignored.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from statedump import ast_nodes as N
from statedump.config import FormatConfig
from statedump.errors import ErrorReporter, StateDumpError
from statedump.formatter import ReflectiveStateFormatter, layout_rows
from statedump.introspection import (
    PythonIntrospectionProvider,
    ScopePolicy,
    TypeIntrospectionProvider,
)
from statedump.parser import parse_expression
from statedump.render import ValueRenderer
from statedump.resolver import ExpressionResolver
from statedump.sinks import LoggingSink, OutputSink

logger = logging.getLogger(__name__)

Expression = Any  # ExpressionNode | str | Callable[[], Any]


@dataclass
class StateDumper:
    """Bundles the collaborators for one call.

    Attributes
    ----------
    config:
        Formatting configuration; ``FormatConfig.from_env()`` when omitted.
    provider:
        Type-introspection provider.
    reporter:
        Collects the diagnostics raised while producing this call's text.
    """

    config: FormatConfig = field(default_factory=FormatConfig.from_env)
    provider: TypeIntrospectionProvider = field(default_factory=PythonIntrospectionProvider)
    reporter: ErrorReporter = field(default_factory=ErrorReporter)

    def __post_init__(self) -> None:
        self.renderer = ValueRenderer(self.config)
        self.resolver = ExpressionResolver(
            self.provider,
            self.reporter,
            const_label=self.config.const_label,
            lambda_label=self.config.lambda_label,
        )
        self.formatter = ReflectiveStateFormatter(
            self.provider, self.renderer, self.config, self.reporter
        )

    # ── expression path ──────────────────────────────────────────

    def to_node(self, expression: Expression, namespace: Mapping[str, Any]) -> Any:
        if isinstance(expression, str):
            return parse_expression(expression, namespace, self.provider)
        if N.is_expression_node(expression):
            return expression
        if callable(expression):
            name = getattr(expression, "__name__", None)
            return N.Lambda(expression, None if name == "<lambda>" else name)
        return expression

    def value_row(self, expression: Expression, namespace: Mapping[str, Any]) -> str:
        try:
            node = self.to_node(expression, namespace)
        except StateDumpError as exc:
            self.reporter.report(exc)
            label = expression if isinstance(expression, str) else self.config.const_label
            return self.renderer.fragment(label, exc.fallback)
        return self.renderer.fragment(
            self.resolver.label(node), self.resolver.resolve(node)
        )

    def format_values(self, expressions, namespace: Mapping[str, Any]) -> str:
        rows = [self.value_row(e, namespace) for e in expressions]
        return layout_rows(rows, self.config)

    # ── state path ───────────────────────────────────────────────

    def format_state(self, target: Any, policy: ScopePolicy) -> str:
        if target is None:
            return self.renderer.null_token
        return self.formatter.format(type(target), target, policy)

    def format_type_state(self, cls: type, policy: ScopePolicy) -> str:
        return self.formatter.format(cls, None, policy)


# ===================================================================== #
#  Module-level API                                                     #
# ===================================================================== #

def _caller_namespace(depth: int = 2) -> Mapping[str, Any]:
    frame = sys._getframe(depth)
    try:
        namespace = dict(frame.f_globals)
        namespace.update(frame.f_locals)
        return namespace
    finally:
        del frame


def _emit(sink: Optional[OutputSink], text: str, context: Any = None) -> None:
    target = sink if sink is not None else LoggingSink()
    try:
        target.emit(text, context)
    except Exception:
        logger.warning("output sink %r failed", target, exc_info=True)


def _policy(policy: Optional[ScopePolicy], include_private: bool, include_static: bool) -> ScopePolicy:
    if policy is not None:
        return policy
    return ScopePolicy.from_options(include_private, include_static)


def format_value(
    expression: Expression,
    *,
    namespace: Optional[Mapping[str, Any]] = None,
    config: Optional[FormatConfig] = None,
    provider: Optional[TypeIntrospectionProvider] = None,
    reporter: Optional[ErrorReporter] = None,
) -> str:
    """Render a single expression as ``name=value``."""
    if namespace is None and isinstance(expression, str):
        namespace = _caller_namespace()
    dumper = _dumper(config, provider, reporter)
    return dumper.value_row(expression, namespace or {})


def format_values(
    *expressions: Expression,
    namespace: Optional[Mapping[str, Any]] = None,
    config: Optional[FormatConfig] = None,
    provider: Optional[TypeIntrospectionProvider] = None,
    reporter: Optional[ErrorReporter] = None,
) -> str:
    if namespace is None and any(isinstance(e, str) for e in expressions):
        namespace = _caller_namespace()
    dumper = _dumper(config, provider, reporter)
    return dumper.format_values(expressions, namespace or {})


def format_state(
    target: Any,
    policy: Optional[ScopePolicy] = None,
    *,
    include_private: bool = False,
    include_static: bool = False,
    config: Optional[FormatConfig] = None,
    provider: Optional[TypeIntrospectionProvider] = None,
    reporter: Optional[ErrorReporter] = None,
) -> str:
    dumper = _dumper(config, provider, reporter)
    return dumper.format_state(target, _policy(policy, include_private, include_static))


def format_type_state(
    cls: type,
    policy: ScopePolicy = ScopePolicy.DEFAULT_STATIC,
    *,
    config: Optional[FormatConfig] = None,
    provider: Optional[TypeIntrospectionProvider] = None,
    reporter: Optional[ErrorReporter] = None,
) -> str:
    dumper = _dumper(config, provider, reporter)
    return dumper.format_type_state(cls, policy)


def value(
    expression: Expression,
    context: Any = None,
    *,
    namespace: Optional[Mapping[str, Any]] = None,
    sink: Optional[OutputSink] = None,
    config: Optional[FormatConfig] = None,
) -> None:
    """Emit ``name=value`` for *expression*.

    *expression* is an expression node, a zero-argument callable, or
    expression text evaluated against *namespace* (the caller's globals and
    locals by default).
    """
    if namespace is None and isinstance(expression, str):
        namespace = _caller_namespace()
    text = format_value(expression, namespace=namespace or {}, config=config)
    _emit(sink, text, context)


def values(
    *expressions: Expression,
    namespace: Optional[Mapping[str, Any]] = None,
    sink: Optional[OutputSink] = None,
    config: Optional[FormatConfig] = None,
) -> None:
    if namespace is None and any(isinstance(e, str) for e in expressions):
        namespace = _caller_namespace()
    text = format_values(*expressions, namespace=namespace or {}, config=config)
    _emit(sink, text)


def state(
    target: Any,
    policy: Optional[ScopePolicy] = None,
    *,
    include_private: bool = False,
    include_static: bool = False,
    context: Any = None,
    sink: Optional[OutputSink] = None,
    config: Optional[FormatConfig] = None,
) -> None:
    """Emit the state of *target*; ``None`` emits the null token."""
    text = format_state(
        target,
        policy,
        include_private=include_private,
        include_static=include_static,
        config=config,
    )
    _emit(sink, text, context if context is not None else target)


def state_of_type(
    cls: type,
    policy: ScopePolicy = ScopePolicy.DEFAULT_STATIC,
    *,
    context: Any = None,
    sink: Optional[OutputSink] = None,
    config: Optional[FormatConfig] = None,
) -> None:
    """Emit the static state of *cls*."""
    _emit(sink, format_type_state(cls, policy, config=config), context)


def _dumper(
    config: Optional[FormatConfig],
    provider: Optional[TypeIntrospectionProvider],
    reporter: Optional[ErrorReporter],
) -> StateDumper:
    kwargs = {}
    if config is not None:
        kwargs["config"] = config
    if provider is not None:
        kwargs["provider"] = provider
    if reporter is not None:
        kwargs["reporter"] = reporter
    return StateDumper(**kwargs)
