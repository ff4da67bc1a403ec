# statedump/formatter.py
"""
Reflective state formatting.

Produces ``<Type> state: name=value, ...`` for an instance (or for the
static members of a type), walking base types unless the policy is
``DECLARED_ONLY``.  Rows are laid out on one line when the multi-line text
fits within ``FormatConfig.max_line_length``, one row per line otherwise.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator, List, Optional, Sequence

from statedump.ast_nodes import MemberDescriptor
from statedump.config import DEFAULT_CONFIG, FormatConfig
from statedump.errors import ErrorReporter, ResolutionError
from statedump.introspection import (
    PythonIntrospectionProvider,
    ScopePolicy,
    TypeIntrospectionProvider,
)
from statedump.render import ValueRenderer

logger = logging.getLogger(__name__)


def layout_rows(rows: Sequence[str], config: FormatConfig, header: str = "") -> str:
    """Join *rows* after *header*, single-line when short enough.

    The multi-line form is ``header`` followed by one row per line.  When
    its length is within the threshold every multi-row separator, including
    any inside a rendered value, becomes the single-row separator.
    """
    sep = config.multi_row_separator
    body = sep.join(rows)
    if not header:
        text = body
    elif rows:
        text = header + sep + body
    else:
        text = header
    if len(text) > config.max_line_length or not sep:
        return text
    return header + body.replace(sep, config.single_row_separator)


class ReflectiveStateFormatter:
    """Renders the members of a type selected by a ``ScopePolicy``."""

    def __init__(
        self,
        provider: Optional[TypeIntrospectionProvider] = None,
        renderer: Optional[ValueRenderer] = None,
        config: Optional[FormatConfig] = None,
        reporter: Optional[ErrorReporter] = None,
    ) -> None:
        self.config = config or (renderer.config if renderer else DEFAULT_CONFIG)
        self.provider = provider or PythonIntrospectionProvider()
        self.renderer = renderer or ValueRenderer(self.config)
        self.reporter = reporter if reporter is not None else ErrorReporter()

    def format(self, cls: type, instance: Any, policy: ScopePolicy) -> str:
        if instance is None and ScopePolicy.INSTANCE in policy:
            return self.renderer.null_token

        header = f"{cls.__name__}{self.config.name_state_separator}"
        rows = list(self._rows(cls, instance, policy))
        logger.debug("%s: %d row(s) under %s", cls.__name__, len(rows), policy)
        return layout_rows(rows, self.config, header)

    def declaring_types(self, cls: type, policy: ScopePolicy) -> Iterator[type]:
        """*cls* itself, then its bases up to the first boundary type."""
        current: Optional[type] = cls
        while True:
            yield current
            if ScopePolicy.DECLARED_ONLY in policy:
                return
            current = self.provider.base_type_of(current)
            if current is None or self._is_boundary(current):
                return

    def _rows(self, cls: type, instance: Any, policy: ScopePolicy) -> Iterator[str]:
        for declaring in self.declaring_types(cls, policy):
            for field in self.provider.fields_of(declaring, policy, owner=instance):
                yield self._row(field, instance, self.provider.get_field)
            for prop in self.provider.properties_of(declaring, policy):
                if prop.readable:
                    yield self._row(prop, instance, self.provider.get_property)

    def _row(self, member: MemberDescriptor, instance: Any, read) -> str:
        try:
            value = read(member, None if member.is_static else instance)
        except ResolutionError as exc:
            self.reporter.report(exc)
            value = exc.fallback
        return self.renderer.fragment(member.name, value)

    def _is_boundary(self, cls: type) -> bool:
        return cls is object or self.config.is_boundary_module(
            getattr(cls, "__module__", None)
        )
