# statedump/ast_nodes.py
"""
Expression tree nodes and member descriptors.

An expression is built explicitly from the node classes below (or with the
builder functions at the bottom of this module, or parsed from text by
``statedump.parser``).  The resolver operates on nothing but these nodes.

A member referenced by a ``MemberAccess`` or ``Call`` is either a bound
``MemberDescriptor`` or, when the owner's type is only known at resolution
time, a plain member name that the resolver binds once the owner value is
available.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Optional, Tuple, Union

if TYPE_CHECKING:
    from statedump.introspection import TypeIntrospectionProvider


# ── Members ──────────────────────────────────────────────────────

class MemberKind(Enum):
    FIELD = "field"
    PROPERTY = "property"
    METHOD = "method"


@dataclass(frozen=True)
class MemberDescriptor:
    """Metadata for one field, property or method of a type.

    ``readable`` only matters for properties; ``returns_value`` and
    ``parameter_count`` only for methods.  ``parameter_count`` counts
    parameters without defaults, excluding the bound ``self``/``cls``.
    """
    name: str
    kind: MemberKind
    declaring_type: type
    is_static: bool = False
    readable: bool = True
    returns_value: bool = True
    parameter_count: int = 0

    @property
    def is_public(self) -> bool:
        return not self.name.startswith("_")

    @property
    def qualified_name(self) -> str:
        return f"{self.declaring_type.__name__}.{self.name}"

    def __str__(self):
        if self.kind is MemberKind.METHOD:
            return f"<method {self.qualified_name}/{self.parameter_count}>"
        return f"<{self.kind.value} {self.qualified_name}>"


MemberRef = Union[MemberDescriptor, str]


def member_name(member: Optional[MemberRef]) -> str:
    if member is None:
        return ""
    if isinstance(member, MemberDescriptor):
        return member.name
    return member


# ── Expressions ──────────────────────────────────────────────────

@dataclass(frozen=True)
class Constant:
    value: Any
    name: Optional[str] = None


@dataclass(frozen=True)
class MemberAccess:
    member: MemberRef
    owner: Optional["ExpressionNode"] = None


@dataclass(frozen=True)
class Call:
    method: Optional[MemberRef]
    receiver: Optional["ExpressionNode"] = None
    arguments: Tuple["ExpressionNode", ...] = ()


@dataclass(frozen=True)
class UnaryConversion:
    operand: Any


@dataclass(frozen=True)
class Lambda:
    body: Callable[[], Any] = field(compare=False)
    name: Optional[str] = None

    def compile_and_invoke(self) -> Any:
        return self.body()


ExpressionNode = Union[Constant, MemberAccess, Call, UnaryConversion, Lambda]

EXPRESSION_NODE_TYPES = (Constant, MemberAccess, Call, UnaryConversion, Lambda)


def is_expression_node(obj: Any) -> bool:
    return isinstance(obj, EXPRESSION_NODE_TYPES)


# ── Builders ─────────────────────────────────────────────────────

def _default_provider() -> "TypeIntrospectionProvider":
    from statedump.introspection import PythonIntrospectionProvider
    return PythonIntrospectionProvider()


def _as_node(obj: Any) -> ExpressionNode:
    return obj if is_expression_node(obj) else Constant(obj)


def constant(value: Any, name: Optional[str] = None) -> Constant:
    return Constant(value, name)


def accessor(body: Callable[[], Any], name: Optional[str] = None) -> Lambda:
    """Wrap a zero-argument callable, optionally with its symbolic name."""
    return Lambda(body, name)


def convert(operand: Any) -> UnaryConversion:
    return UnaryConversion(operand)


def _bind_on_constant(
    owner: ExpressionNode,
    name: str,
    provider: "TypeIntrospectionProvider",
) -> Tuple[MemberRef, Optional[ExpressionNode]]:
    # Only constants have a value before resolution; anything else is bound
    # by the resolver.
    if not isinstance(owner, Constant) or owner.value is None:
        return name, owner
    value = owner.value
    if isinstance(value, type):
        descriptor = provider.describe(value, name)
    else:
        descriptor = provider.describe(type(value), name, owner=value)
    if descriptor is None:
        return name, owner
    if descriptor.is_static:
        return descriptor, None
    return descriptor, owner


def member(owner: Any, name: str, provider: Optional["TypeIntrospectionProvider"] = None) -> MemberAccess:
    """Build ``owner.name``.

    *owner* may be a node or a plain value (wrapped as a ``Constant``).
    Static members found on a constant owner are bound with ``owner=None``.
    """
    bound, owner_node = _bind_on_constant(
        _as_node(owner), name, provider or _default_provider()
    )
    return MemberAccess(bound, owner_node)


def static_member(
    cls: type, name: str, provider: Optional["TypeIntrospectionProvider"] = None
) -> MemberAccess:
    """Build ``cls.name`` for a static member.

    An instance member named here is kept with ``owner=None`` and is
    reported as a missing argument when resolved.
    """
    descriptor = (provider or _default_provider()).describe(cls, name)
    if descriptor is None:
        return MemberAccess(name, Constant(cls))
    return MemberAccess(descriptor, None)


def call(
    receiver: Any,
    name: Optional[str] = None,
    *arguments: Any,
    provider: Optional["TypeIntrospectionProvider"] = None,
) -> Call:
    """Build ``receiver.name(*arguments)``, or ``receiver()`` when *name* is None."""
    args = tuple(_as_node(a) for a in arguments)
    receiver_node = _as_node(receiver)
    if name is None:
        return Call(None, receiver_node, args)
    bound, owner_node = _bind_on_constant(
        receiver_node, name, provider or _default_provider()
    )
    return Call(bound, owner_node, args)
