# statedump/parser.py
"""
Expression text → expression tree.

Parses the small expression language accepted by ``statedump.value``::

    player.stats.health
    Config.DEBUG
    inventory.items.count()
    (score)
    42, 3.5, "text", True, None

An identifier at the root is looked up in the supplied namespace and becomes
a named ``Constant``; ``.name`` becomes a ``MemberAccess``; ``name(args)``
becomes a ``Call``; a parenthesized expression becomes a
``UnaryConversion``.  Arguments are parsed so that calls carrying them can
be reported, not evaluated.

Depends on:
    - parsimonious (PEG parser)
"""

from __future__ import annotations

import ast
import builtins
import logging
from typing import Any, List, Mapping, Optional, Tuple

from parsimonious.exceptions import IncompleteParseError, ParseError, VisitationError
from parsimonious.grammar import Grammar
from parsimonious.nodes import Node, NodeVisitor

from statedump import ast_nodes as N
from statedump.errors import ExpressionSyntaxError
from statedump.introspection import PythonIntrospectionProvider, TypeIntrospectionProvider

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  GRAMMAR (Parsimonious PEG)
# ═══════════════════════════════════════════════════════════════════

EXPRESSION_GRAMMAR = Grammar(r'''
    expression          = _ postfix _
    postfix             = primary trailer*
    trailer             = attribute / arguments
    attribute           = _ "." _ identifier
    arguments           = _ "(" _ argument_list? _ ")"
    argument_list       = expression ("," expression)* ","?

    primary             = literal / identifier / group
    group               = "(" expression ")"

    literal             = float / integer / string / keyword_literal
    keyword_literal     = ("True" / "False" / "None") !name_char
    float               = ~r"[-+]?(\d+\.\d*|\.\d+)([eE][-+]?\d+)?|[-+]?\d+[eE][-+]?\d+"
    integer             = ~r"[-+]?(0[xX][0-9a-fA-F_]+|0[oO][0-7_]+|0[bB][01_]+|\d[\d_]*)"
    string              = ~r'"(?:[^"\\]|\\.)*"' / ~r"'(?:[^'\\]|\\.)*'"

    identifier          = !keyword_literal ~r"[A-Za-z_][A-Za-z0-9_]*"
    name_char           = ~r"[A-Za-z0-9_]"
    _                   = ~r"\s*"
''')


# ═══════════════════════════════════════════════════════════════════
#  PARSE TREE → EXPRESSION NODES
# ═══════════════════════════════════════════════════════════════════

class _Name(str):
    """An identifier not yet looked up."""


def _repeated(visited: Any) -> List[Any]:
    # an empty ``*`` or ``?`` match comes back as the bare Node
    return visited if isinstance(visited, list) else []


class ExpressionBuilder(NodeVisitor):
    """Transforms a Parsimonious parse tree into expression nodes."""

    grammar = EXPRESSION_GRAMMAR
    unwrapped_exceptions = (ExpressionSyntaxError,)

    def __init__(
        self,
        namespace: Mapping[str, Any],
        provider: TypeIntrospectionProvider,
    ) -> None:
        self.namespace = namespace
        self.provider = provider

    def generic_visit(self, node: Node, visited_children: List[Any]) -> Any:
        return visited_children or node

    # ── structure ────────────────────────────────────────────────

    def visit_expression(self, node, visited_children):
        _, expr, _ = visited_children
        return expr

    def visit_postfix(self, node, visited_children):
        primary, trailers = visited_children
        current = primary
        pending: Optional[Tuple[N.ExpressionNode, str]] = None
        for kind, payload in _repeated(trailers):
            if kind == "attr":
                if pending is not None:
                    current = N.member(*pending, provider=self.provider)
                pending = (current, payload)
            elif pending is not None:
                owner, name = pending
                current = N.call(owner, name, *payload, provider=self.provider)
                pending = None
            else:
                current = N.Call(None, current, payload)
        if pending is not None:
            current = N.member(*pending, provider=self.provider)
        return current

    def visit_trailer(self, node, visited_children):
        return visited_children[0]

    def visit_attribute(self, node, visited_children):
        *_, name = visited_children
        return ("attr", str(name))

    def visit_arguments(self, node, visited_children):
        _, _, _, arg_list, _, _ = visited_children
        args = _repeated(arg_list)
        return ("call", tuple(args[0]) if args else ())

    def visit_argument_list(self, node, visited_children):
        first, rest, _ = visited_children
        return [first] + [expr for _, expr in _repeated(rest)]

    def visit_primary(self, node, visited_children):
        child = visited_children[0]
        if isinstance(child, _Name):
            return self._lookup(child)
        return child

    def visit_group(self, node, visited_children):
        _, expr, _ = visited_children
        return N.UnaryConversion(expr)

    # ── atoms ────────────────────────────────────────────────────

    def visit_literal(self, node, visited_children):
        return visited_children[0]

    def visit_keyword_literal(self, node, visited_children):
        return N.Constant({"True": True, "False": False, "None": None}[node.text])

    def visit_float(self, node, visited_children):
        return self._literal(node.text)

    def visit_integer(self, node, visited_children):
        return self._literal(node.text)

    def visit_string(self, node, visited_children):
        return self._literal(node.text)

    def visit_identifier(self, node, visited_children):
        return _Name(node.text)

    # ── helpers ──────────────────────────────────────────────────

    @staticmethod
    def _literal(text: str) -> N.Constant:
        # the token rules are looser than Python's, e.g. ``01`` or ``1__0``
        try:
            return N.Constant(ast.literal_eval(text))
        except (SyntaxError, ValueError) as exc:
            raise ExpressionSyntaxError(
                f"invalid literal {text!r}",
                subject=text,
                cause=exc,
            ) from exc

    def _lookup(self, name: str) -> N.Constant:
        if name in self.namespace:
            return N.Constant(self.namespace[name], name=name)
        if hasattr(builtins, name):
            return N.Constant(getattr(builtins, name), name=name)
        raise ExpressionSyntaxError(
            f"name {name!r} is not defined",
            subject=name,
            hint="pass the variable through 'namespace='",
        )


# ═══════════════════════════════════════════════════════════════════
#  PUBLIC API
# ═══════════════════════════════════════════════════════════════════

def parse_expression(
    text: str,
    namespace: Optional[Mapping[str, Any]] = None,
    provider: Optional[TypeIntrospectionProvider] = None,
) -> N.ExpressionNode:
    """Parse *text* into an expression tree.

    Raises
    ------
    ExpressionSyntaxError
        On malformed text or an unknown root name.
    """
    try:
        tree = EXPRESSION_GRAMMAR.parse(text)
    except IncompleteParseError as exc:
        raise ExpressionSyntaxError(
            f"unexpected text at column {exc.column()}",
            subject=text,
            cause=exc,
        ) from exc
    except ParseError as exc:
        raise ExpressionSyntaxError(
            f"invalid expression at column {exc.column()}",
            subject=text,
            cause=exc,
        ) from exc

    builder = ExpressionBuilder(namespace or {}, provider or PythonIntrospectionProvider())
    try:
        node = builder.visit(tree)
    except VisitationError as exc:
        raise ExpressionSyntaxError(
            "cannot build an expression from this text",
            subject=text,
            cause=exc,
        ) from exc
    logger.debug("parsed %r into %r", text, node)
    return node
