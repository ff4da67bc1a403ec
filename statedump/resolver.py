# statedump/resolver.py
"""
Expression resolution.

``ExpressionResolver.resolve`` walks an expression tree down to a runtime
value.  Failures are raised internally as ``ResolutionError`` subclasses;
``resolve`` reports each one to the ``ErrorReporter`` and returns the
error's fallback value instead, so it never raises.

Only zero-argument calls are evaluated: there is no argument binding.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from statedump import ast_nodes as N
from statedump.ast_nodes import MemberDescriptor, MemberKind
from statedump.errors import (
    ErrorReporter,
    MemberAccessFailed,
    MethodHasParameters,
    MethodReturnsNothing,
    MissingArgument,
    PropertyNotReadable,
    ResolutionError,
    UnsupportedExpressionShape,
    UnsupportedMember,
)
from statedump.introspection import PythonIntrospectionProvider, TypeIntrospectionProvider

logger = logging.getLogger(__name__)


class ExpressionResolver:
    """Evaluates expression nodes through a ``TypeIntrospectionProvider``."""

    def __init__(
        self,
        provider: Optional[TypeIntrospectionProvider] = None,
        reporter: Optional[ErrorReporter] = None,
        const_label: str = "const",
        lambda_label: str = "lambda",
    ) -> None:
        self.provider = provider or PythonIntrospectionProvider()
        self.reporter = reporter if reporter is not None else ErrorReporter()
        self.const_label = const_label
        self.lambda_label = lambda_label

    # ------------------------------------------------------------------ #
    #  Public API                                                         #
    # ------------------------------------------------------------------ #

    def resolve(self, node: Any) -> Any:
        try:
            return self._resolve(node)
        except ResolutionError as exc:
            self.reporter.report(exc)
            return exc.fallback

    def label(self, node: Any) -> str:
        """Name shown to the left of ``=`` for *node*."""
        if isinstance(node, N.Constant):
            return node.name or self.const_label
        if isinstance(node, N.MemberAccess):
            return N.member_name(node.member)
        if isinstance(node, N.Call):
            if node.method is None:
                return self.label(node.receiver)
            return N.member_name(node.method)
        if isinstance(node, N.UnaryConversion):
            if N.is_expression_node(node.operand):
                return self.label(node.operand)
            return self.const_label
        if isinstance(node, N.Lambda):
            return node.name or self.lambda_label
        return self.const_label

    # ------------------------------------------------------------------ #
    #  Dispatch                                                           #
    # ------------------------------------------------------------------ #

    def _resolve(self, node: Any) -> Any:
        if node is None:
            raise MissingArgument("expression had a missing argument")
        if isinstance(node, N.Constant):
            return node.value
        if isinstance(node, N.MemberAccess):
            return self._resolve_member_access(node)
        if isinstance(node, N.Call):
            return self._resolve_call(node)
        if isinstance(node, N.UnaryConversion):
            return self._resolve_conversion(node)
        if isinstance(node, N.Lambda):
            return self._invoke_lambda(node)
        raise UnsupportedExpressionShape(
            f"expected a Constant, MemberAccess, Call, UnaryConversion or "
            f"Lambda node, got {type(node).__name__}"
        )

    def _resolve_member_access(self, node: N.MemberAccess) -> Any:
        member = node.member
        if isinstance(member, MemberDescriptor) and member.is_static:
            owner = None
        else:
            owner = self._owner_value(node.owner, member)
            member = self._bind(member, owner)

        if member.kind is MemberKind.FIELD:
            return self.provider.get_field(member, owner)
        if member.kind is MemberKind.PROPERTY:
            if not member.readable:
                raise PropertyNotReadable(
                    "property has no getter", subject=member.qualified_name
                )
            return self.provider.get_property(member, owner)
        raise UnsupportedMember(
            f"member access reached a {member.kind.value}, "
            f"not a field or property",
            subject=member.qualified_name,
            hint="call it with '()' instead",
        )

    def _resolve_call(self, node: N.Call) -> Any:
        if node.method is None:
            if node.arguments:
                raise MethodHasParameters(
                    f"call passes {len(node.arguments)} argument(s)",
                    subject=self.label(node.receiver),
                )
            if isinstance(node.receiver, N.Lambda):
                return self._invoke_lambda(node.receiver)
            callee = self._resolve(node.receiver)
            if not callable(callee):
                raise UnsupportedExpressionShape(
                    f"{type(callee).__name__} object is not callable",
                    subject=self.label(node.receiver),
                )
            return self._invoke(callee, self.label(node.receiver))

        method = node.method
        if isinstance(method, MemberDescriptor) and method.is_static:
            receiver = None
        else:
            receiver = self._owner_value(node.receiver, method)
            method = self._bind(method, receiver)

        if method.kind is not MemberKind.METHOD:
            raise UnsupportedMember(
                f"{method.kind.value} is not callable as a method",
                subject=method.qualified_name,
            )
        if node.arguments or method.parameter_count > 0:
            raise MethodHasParameters(
                f"method takes {method.parameter_count} required "
                f"parameter(s), call passes {len(node.arguments)}",
                subject=method.qualified_name,
                fallback=method,
            )
        if not method.returns_value:
            raise MethodReturnsNothing(
                "method is annotated to return None",
                subject=method.qualified_name,
            )
        return self.provider.invoke(method, receiver)

    def _resolve_conversion(self, node: N.UnaryConversion) -> Any:
        operand = node.operand
        if N.is_expression_node(operand):
            return self._resolve(operand)
        # a raw payload is taken as a literal
        logger.debug("conversion operand %r treated as a constant", operand)
        return operand

    # ------------------------------------------------------------------ #
    #  Helpers                                                            #
    # ------------------------------------------------------------------ #

    def _owner_value(self, owner: Optional[N.ExpressionNode], member: N.MemberRef) -> Any:
        if owner is None:
            raise MissingArgument(
                "instance member accessed without an owner expression",
                subject=N.member_name(member),
            )
        return self._resolve(owner)

    def _bind(self, member: N.MemberRef, owner: Any) -> MemberDescriptor:
        if isinstance(member, MemberDescriptor):
            return member
        if owner is None:
            raise MissingArgument(
                "owner expression resolved to None", subject=member
            )
        if isinstance(owner, type):
            descriptor = self.provider.describe(owner, member)
        else:
            descriptor = self.provider.describe(type(owner), member, owner=owner)
        if descriptor is None:
            owner_name = owner.__name__ if isinstance(owner, type) else type(owner).__name__
            raise UnsupportedMember(
                f"{owner_name} has no member {member!r}", subject=member
            )
        return descriptor

    def _invoke_lambda(self, node: N.Lambda) -> Any:
        logger.debug("invoking lambda %s", node.name or "<anonymous>")
        return self._invoke(node.compile_and_invoke, self.label(node))

    @staticmethod
    def _invoke(func: Any, subject: str) -> Any:
        try:
            return func()
        except Exception as exc:
            raise MemberAccessFailed(
                f"{type(exc).__name__}: {exc}", subject=subject, cause=exc
            ) from exc
