"""Shared building blocks: slotted dataclasses, class registries, text protocols and value mixins."""

from __future__ import annotations

import functools
import math
import types
from abc import ABC
from dataclasses import dataclass as _dtcls
from inspect import isabstract
from typing import (
    Any,
    Callable,
    Generic,
    MutableMapping,
    Protocol,
    TypeVar,
    cast,
    runtime_checkable,
)

from typing_extensions import Self, TypeAlias, dataclass_transform


_dT = TypeVar("_dT")


@functools.wraps(_dtcls)
@dataclass_transform()
def slots_dataclass(*args: Any, **kwargs: Any) -> Callable[[_dT], _dT]:
    """Wrapper for dataclass decorator that adds slots by default."""
    # N.B. zero-argument super() doesn't work in methods of slotted dataclasses
    kwargs.setdefault("slots", True)
    return cast(Callable[[_dT], _dT], _dtcls(*args, **kwargs))


class _DefaultType:
    """Type of the :data:`DEFAULT` sentinel, used as the registry key of catch-all classes."""

    def __eq__(self, other: object) -> bool:
        return isinstance(other, _DefaultType)

    def __hash__(self) -> int:
        return hash(self.__class__)

    def __repr__(self) -> str:
        return "DEFAULT"


DEFAULT = _DefaultType()
DefaultType: TypeAlias = _DefaultType


_ID = TypeVar("_ID")
_RT = TypeVar("_RT", bound="Registry")


class Registry(ABC, Generic[_ID, _RT]):
    """
    Abstract base class for classes that keep a registry of their concrete subclasses.

    A registry root is declared with the ``registry=True`` and ``registry_attr=<name>``
    class keywords. Every concrete subclass is then registered under the value of its
    ``registry_attr`` class attribute, and can be looked up with :meth:`lookup`.
    Abstract subclasses (with ABC in their bases, or abstract methods) are skipped.
    """

    __registry__: MutableMapping[_ID, type[_RT]]
    __registry_attr_name__: str
    __registry_root__: type[Registry]

    @classmethod
    def is_abstract(cls) -> bool:
        """Whether the class is declared abstract, and thus not registered."""
        return isabstract(cls) or ABC in cls.__bases__

    def __init_subclass__(
        cls, *, registry: bool = False, registry_attr: str | None = None, **kwargs: Any
    ):
        super().__init_subclass__(**kwargs)

        if registry:
            if not registry_attr:
                raise AttributeError(f"No registry_attr specified for registry {cls.__name__}")
            cls.__registry__ = {}
            cls.__registry_attr_name__ = registry_attr
            cls.__registry_root__ = cls
            return

        registry_id: Any = getattr(cls, cls.__registry_attr_name__, None)
        if registry_id is None:
            if cls.is_abstract():
                return
            raise ValueError(
                f"Cannot register {cls.__name__} in {cls.__registry_root__.__name__}, "
                f"no {cls.__registry_attr_name__} defined"
            )

        registered: type[_RT] | None = cls.__registry__.get(registry_id)
        # slotted dataclasses are re-created by their decorator, replacing the original class
        is_same_class: bool = registered is not None and (
            (registered.__module__, registered.__qualname__) == (cls.__module__, cls.__qualname__)
        )
        if registered is not None and not is_same_class:
            raise NameError(
                f"{registered.__name__} and {cls.__name__} share the same "
                f'{cls.__registry_attr_name__} "{registry_id}"'
            )
        cls.__registry__[registry_id] = cls

    @classmethod
    def get_registry(cls) -> types.MappingProxyType[_ID, type[_RT]]:
        """Get a read-only view of the registry mapping."""
        return types.MappingProxyType(cls.__registry__)

    @classmethod
    def lookup(cls, registry_id: _ID) -> type[_RT]:
        """
        Return the subclass registered under the given key.

        :raises KeyError: if no subclass is registered for the key.
        """
        registered: type[_RT] | None = cls.__registry__.get(registry_id)
        if registered is None:
            raise KeyError(
                f"No {cls.__registry_root__.__name__} registered for "
                f'{cls.__registry_attr_name__} "{registry_id}"'
            )
        return registered


@runtime_checkable
class Parseable(Protocol):
    """Objects that can be built from their SDP text form."""

    @classmethod
    def parse(cls, raw_value: str) -> Self:
        """Build an instance from its text form."""


@runtime_checkable
class Serializable(Protocol):
    """Objects that can be written back to their SDP text form."""

    def serialize(self) -> str:
        """Return the text form of the object."""


@runtime_checkable
class ParseableSerializable(Parseable, Serializable, Protocol):
    """Objects that can be both read from and written to SDP text."""


@runtime_checkable
class FieldsParser(Protocol):
    """Objects whose text value splits into the keyword arguments of their constructor."""

    @classmethod
    def parse_raw_value(cls, raw_value: str) -> dict[str, Any]:
        """Split a text value into constructor keyword arguments."""


@runtime_checkable
class FieldsParserSerializer(FieldsParser, Serializable, Protocol):
    """A :class:`FieldsParser` that can also serialize its values back to text."""


@slots_dataclass
class StrValueMixin(FieldsParserSerializer):
    """Dataclass mixin for a payload made of a single text ``value``."""

    value: str

    @classmethod
    def parse_raw_value(cls, raw_value: str) -> dict[str, Any]:  # noqa: D102
        return {"value": raw_value}

    def serialize(self) -> str:  # noqa: D102
        return self.value


@slots_dataclass
class OptionalStrValueMixin(FieldsParserSerializer):
    """Like :class:`StrValueMixin`, but the ``value`` can be absent (``None``)."""

    value: str | None

    @classmethod
    def parse_raw_value(cls, raw_value: str) -> dict[str, Any]:  # noqa: D102
        return {"value": raw_value}

    def serialize(self) -> str:  # noqa: D102
        return "" if self.value is None else self.value


@slots_dataclass
class RealValueMixin(FieldsParserSerializer):
    """
    Dataclass mixin for a payload made of a single real number ``value``.

    Integral text is kept as an ``int``, so that it serializes back without a fraction.
    """

    value: int | float

    @classmethod
    def parse_raw_value(cls, raw_value: str) -> dict[str, Any]:  # noqa: D102
        text = raw_value.strip()
        value: int | float = int(text) if text.isdigit() else float(text)
        if not math.isfinite(value):
            raise ValueError(f"Invalid real value {raw_value}")
        return {"value": value}

    def serialize(self) -> str:  # noqa: D102
        return str(self.value)

    def __float__(self) -> float:
        return float(self.value)
