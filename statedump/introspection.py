# statedump/introspection.py
"""
Scope policies and the type-introspection provider.

``TypeIntrospectionProvider`` is the contract the resolver and the formatter
consume.  ``PythonIntrospectionProvider`` implements it over ordinary
Python classes:

* instance fields are annotated (non-``ClassVar``) attributes, ``__slots__``
  entries and, for the concrete type of an owner, the attributes found in
  the owner's ``__dict__``;
* static fields are plain class attributes (anything in the class
  ``__dict__`` that is not a descriptor, a function or a nested class);
* properties are ``property`` and ``functools.cached_property`` objects;
* methods are functions, ``staticmethod`` and ``classmethod`` objects.

An instance attribute that stores the value of a same-named class-level
descriptor (``cached_property`` caches into the instance ``__dict__``) is
the descriptor's storage, not a field of its own.
"""

from __future__ import annotations

import enum
import inspect
import logging
import types
import typing
from functools import cached_property
from typing import (
    Any,
    Callable,
    Dict,
    Iterator,
    List,
    Optional,
    Protocol,
    Set,
    runtime_checkable,
)

from statedump.ast_nodes import MemberDescriptor, MemberKind
from statedump.errors import MemberAccessFailed

logger = logging.getLogger(__name__)


# ===================================================================== #
#  Scope policy                                                          #
# ===================================================================== #

class ScopePolicy(enum.Flag):
    """Which members a state dump includes."""

    NONE = 0
    INSTANCE = 1
    STATIC = 2
    PUBLIC = 4
    NON_PUBLIC = 8
    DECLARED_ONLY = 16

    DEFAULT_INSTANCE = PUBLIC | INSTANCE | DECLARED_ONLY
    DEFAULT_STATIC = PUBLIC | STATIC | DECLARED_ONLY

    @classmethod
    def from_options(
        cls, include_private: bool = False, include_static: bool = False
    ) -> "ScopePolicy":
        policy = cls.DECLARED_ONLY | cls.INSTANCE | cls.PUBLIC
        if include_private:
            policy |= cls.NON_PUBLIC
        if include_static:
            policy |= cls.STATIC
        return policy

    def admits(self, descriptor: MemberDescriptor) -> bool:
        """True if *descriptor*'s visibility and static-ness are selected."""
        if descriptor.is_static:
            if ScopePolicy.STATIC not in self:
                return False
        elif ScopePolicy.INSTANCE not in self:
            return False
        if descriptor.is_public:
            return ScopePolicy.PUBLIC in self
        return ScopePolicy.NON_PUBLIC in self


# ===================================================================== #
#  Provider contract                                                     #
# ===================================================================== #

@runtime_checkable
class TypeIntrospectionProvider(Protocol):
    """Yields member metadata for a type and reads member values."""

    def fields_of(
        self, cls: type, policy: ScopePolicy, owner: Any = None
    ) -> List[MemberDescriptor]: ...
    def properties_of(self, cls: type, policy: ScopePolicy) -> List[MemberDescriptor]: ...
    def get_field(self, descriptor: MemberDescriptor, owner: Any) -> Any: ...
    def get_property(self, descriptor: MemberDescriptor, owner: Any) -> Any: ...
    def base_type_of(self, cls: type) -> Optional[type]: ...
    def describe(
        self, cls: type, name: str, owner: Any = None
    ) -> Optional[MemberDescriptor]: ...
    def invoke(self, descriptor: MemberDescriptor, receiver: Any) -> Any: ...


# ===================================================================== #
#  Helpers                                                               #
# ===================================================================== #

_METHOD_TYPES = (types.FunctionType, staticmethod, classmethod)
_PROPERTY_TYPES = (property, cached_property)
_HIDDEN_SLOTS = frozenset({"__dict__", "__weakref__"})


def _is_dunder(name: str) -> bool:
    return len(name) > 4 and name.startswith("__") and name.endswith("__")


def _is_classvar(annotation: Any) -> bool:
    if isinstance(annotation, str):
        text = annotation.replace(" ", "")
        return text.startswith(("ClassVar", "typing.ClassVar"))
    return annotation is typing.ClassVar or typing.get_origin(annotation) is typing.ClassVar


def _own_annotations(cls: type) -> Dict[str, Any]:
    try:
        return dict(inspect.get_annotations(cls))
    except Exception:
        logger.debug("annotations of %r unavailable", cls, exc_info=True)
        return {}


def _instance_annotations(cls: type) -> List[str]:
    return [
        name for name, ann in _own_annotations(cls).items()
        if not _is_classvar(ann)
    ]


def _own_slots(cls: type) -> List[str]:
    slots = cls.__dict__.get("__slots__", ())
    if isinstance(slots, str):
        slots = (slots,)
    return [s for s in slots if s not in _HIDDEN_SLOTS]


def _is_data_descriptor(value: Any) -> bool:
    kind = type(value)
    return hasattr(kind, "__get__") and (
        hasattr(kind, "__set__") or hasattr(kind, "__delete__")
    )


def _owner_dict(owner: Any) -> Dict[str, Any]:
    if owner is None or isinstance(owner, type):
        return {}
    try:
        return vars(owner)
    except TypeError:
        return {}


def _returns_nothing(annotation: Any) -> bool:
    return annotation is None or annotation is type(None) or annotation == "None"


def _signature_of(func: Callable) -> Optional[inspect.Signature]:
    try:
        return inspect.signature(func)
    except (TypeError, ValueError):
        logger.debug("no signature for %r", func)
        return None


def _required_parameters(signature: inspect.Signature, skip_first: bool) -> int:
    params = list(signature.parameters.values())
    if skip_first and params:
        params = params[1:]
    return sum(
        1 for p in params
        if p.default is inspect.Parameter.empty
        and p.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    )


# ===================================================================== #
#  Default provider                                                      #
# ===================================================================== #

class PythonIntrospectionProvider:
    """Reads member metadata straight from Python class objects."""

    # -- enumeration --------------------------------------------------

    def fields_of(
        self, cls: type, policy: ScopePolicy, owner: Any = None
    ) -> List[MemberDescriptor]:
        fields: List[MemberDescriptor] = []
        if ScopePolicy.INSTANCE in policy:
            fields.extend(self._instance_fields(cls, owner))
        if ScopePolicy.STATIC in policy:
            fields.extend(self._static_fields(cls))
        return [f for f in fields if policy.admits(f)]

    def properties_of(self, cls: type, policy: ScopePolicy) -> List[MemberDescriptor]:
        result = []
        for name, value in cls.__dict__.items():
            if isinstance(value, _PROPERTY_TYPES):
                descriptor = self._property(cls, name, value)
                if policy.admits(descriptor):
                    result.append(descriptor)
        return result

    def base_type_of(self, cls: type) -> Optional[type]:
        # Single chain through the first base, like a single-inheritance
        # hierarchy; additional mixins are not walked.
        bases = getattr(cls, "__bases__", ())
        return bases[0] if bases else None

    def _instance_fields(self, cls: type, owner: Any) -> Iterator[MemberDescriptor]:
        seen: Set[str] = set()
        declared = _instance_annotations(cls) + _own_slots(cls)
        for name in declared:
            if name in seen or isinstance(self._class_attr(cls, name), _PROPERTY_TYPES):
                continue
            seen.add(name)
            yield MemberDescriptor(name, MemberKind.FIELD, cls)

        if owner is None or type(owner) is not cls:
            return
        declared_anywhere = self._declared_in_mro(cls)
        for name in _owner_dict(owner):
            if name in seen or name in declared_anywhere or _is_dunder(name):
                continue
            if isinstance(self._class_attr(cls, name), _PROPERTY_TYPES):
                # descriptor storage, rendered once as the property
                continue
            seen.add(name)
            yield MemberDescriptor(name, MemberKind.FIELD, cls)

    def _static_fields(self, cls: type) -> Iterator[MemberDescriptor]:
        instance_names = set(_instance_annotations(cls))
        for name, value in cls.__dict__.items():
            if _is_dunder(name) or name in instance_names:
                continue
            if isinstance(value, type) or hasattr(type(value), "__get__"):
                continue
            yield MemberDescriptor(name, MemberKind.FIELD, cls, is_static=True)

    def _declared_in_mro(self, cls: type) -> Set[str]:
        names: Set[str] = set()
        for klass in cls.__mro__:
            names.update(_instance_annotations(klass))
            names.update(_own_slots(klass))
        return names

    @staticmethod
    def _class_attr(cls: type, name: str) -> Any:
        for klass in cls.__mro__:
            if name in klass.__dict__:
                return klass.__dict__[name]
        return None

    # -- single member lookup ------------------------------------------

    def describe(
        self, cls: type, name: str, owner: Any = None
    ) -> Optional[MemberDescriptor]:
        """Describe ``cls.name``, consulting *owner*'s ``__dict__`` if given."""
        for klass in cls.__mro__:
            if name not in klass.__dict__:
                continue
            value = klass.__dict__[name]
            if isinstance(value, _PROPERTY_TYPES):
                return self._property(klass, name, value)
            if isinstance(value, types.MemberDescriptorType):
                return MemberDescriptor(name, MemberKind.FIELD, klass)
            if _is_data_descriptor(value):
                return MemberDescriptor(name, MemberKind.PROPERTY, klass)
            if name in _owner_dict(owner):
                return MemberDescriptor(name, MemberKind.FIELD, type(owner))
            if isinstance(value, _METHOD_TYPES) or (
                callable(value) and hasattr(type(value), "__get__")
            ):
                return self._method(klass, name, value)
            if name in _instance_annotations(klass):
                return MemberDescriptor(name, MemberKind.FIELD, klass)
            return MemberDescriptor(name, MemberKind.FIELD, klass, is_static=True)

        if name in _owner_dict(owner):
            return MemberDescriptor(name, MemberKind.FIELD, type(owner))
        meta = type(cls)
        if owner is None and meta is not cls:
            # attributes provided by the metaclass, e.g. ``SomeClass.__name__``
            return self.describe(meta, name)
        return None

    def _property(self, cls: type, name: str, value: Any) -> MemberDescriptor:
        readable = value.fget is not None if isinstance(value, property) else True
        return MemberDescriptor(name, MemberKind.PROPERTY, cls, readable=readable)

    def _method(self, cls: type, name: str, value: Any) -> MemberDescriptor:
        is_static = isinstance(value, (staticmethod, classmethod))
        func = value.__func__ if is_static else value
        skip_first = not isinstance(value, staticmethod)
        signature = _signature_of(func)
        if signature is None:
            return MemberDescriptor(name, MemberKind.METHOD, cls, is_static=is_static)
        return MemberDescriptor(
            name,
            MemberKind.METHOD,
            cls,
            is_static=is_static,
            returns_value=not _returns_nothing(signature.return_annotation),
            parameter_count=_required_parameters(signature, skip_first),
        )

    # -- value access --------------------------------------------------

    def get_field(self, descriptor: MemberDescriptor, owner: Any) -> Any:
        target = descriptor.declaring_type if descriptor.is_static else owner
        return self._read(descriptor, lambda: getattr(target, descriptor.name))

    def get_property(self, descriptor: MemberDescriptor, owner: Any) -> Any:
        target = descriptor.declaring_type if descriptor.is_static else owner
        return self._read(descriptor, lambda: getattr(target, descriptor.name))

    def invoke(self, descriptor: MemberDescriptor, receiver: Any) -> Any:
        target = descriptor.declaring_type if descriptor.is_static else receiver
        return self._read(descriptor, lambda: getattr(target, descriptor.name)())

    @staticmethod
    def _read(descriptor: MemberDescriptor, read: Callable[[], Any]) -> Any:
        try:
            return read()
        except Exception as exc:
            raise MemberAccessFailed(
                f"{type(exc).__name__}: {exc}",
                subject=descriptor.qualified_name,
                cause=exc,
            ) from exc
