"""statedump — render object state and expression values for debugging.

Submodules
----------
ast_nodes
    Expression tree nodes (``Constant``, ``MemberAccess``, ``Call``,
    ``UnaryConversion``, ``Lambda``), ``MemberDescriptor`` and builders.

introspection
    ``ScopePolicy`` flags, the ``TypeIntrospectionProvider`` contract and
    ``PythonIntrospectionProvider``.

parser
    Parsimonious grammar turning expression text into nodes.

resolver
    ``ExpressionResolver``: expression tree → value.

render
    ``ValueRenderer``: value → text.

formatter
    ``ReflectiveStateFormatter``: type/instance + policy → text.

errors
    Error codes (``SD-XXXX``), the exception hierarchy and
    ``ErrorReporter``.

Usage
-----
Programmatic::

    import statedump

    statedump.value("player.health")
    statedump.values("player.name", "player.level")
    statedump.state(player)
    statedump.state_of_type(Settings)

Command-line::

    python -m statedump state myapp.settings:Settings --private
"""

from __future__ import annotations

__version__: str = "0.1.0"

from statedump.ast_nodes import (
    Call,
    Constant,
    Lambda,
    MemberAccess,
    MemberDescriptor,
    MemberKind,
    UnaryConversion,
    accessor,
    call,
    constant,
    convert,
    member,
    static_member,
)
from statedump.config import FormatConfig
from statedump.errors import ErrorReporter, ResolutionError, StateDumpError
from statedump.introspection import (
    PythonIntrospectionProvider,
    ScopePolicy,
    TypeIntrospectionProvider,
)
from statedump.runtime import (
    StateDumper,
    format_state,
    format_type_state,
    format_value,
    format_values,
    state,
    state_of_type,
    value,
    values,
)
from statedump.sinks import LoggingSink, NullSink, OutputSink, StreamSink

__all__: list[str] = [
    "__version__",
    "Call",
    "Constant",
    "ErrorReporter",
    "FormatConfig",
    "Lambda",
    "LoggingSink",
    "MemberAccess",
    "MemberDescriptor",
    "MemberKind",
    "NullSink",
    "OutputSink",
    "PythonIntrospectionProvider",
    "ResolutionError",
    "ScopePolicy",
    "StateDumpError",
    "StateDumper",
    "StreamSink",
    "TypeIntrospectionProvider",
    "UnaryConversion",
    "accessor",
    "call",
    "constant",
    "convert",
    "format_state",
    "format_type_state",
    "format_value",
    "format_values",
    "member",
    "state",
    "state_of_type",
    "static_member",
    "value",
    "values",
]
