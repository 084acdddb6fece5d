"""Common base classes for SDP sections (session, media and time descriptions)."""

from __future__ import annotations

import logging
from abc import ABC
from typing import Any, Callable, Iterator, TypeVar

from sdpmodel.exceptions import SDPInvalidArgument, SDPParseError

from .attributes import SDPAttribute, UnknownAttribute
from .fields import SDPAttributeField, SDPBandwidthField, SDPField


__all__ = [
    "SDPSection",
    "KeyedFieldsMixin",
]


_logger = logging.getLogger(__name__)

_T = TypeVar("_T")


class SDPSection(ABC):
    """
    Abstract base class for SDP sections.

    List properties of a section can be absent (None) until they are first needed:
    :meth:`_get_list` materializes them lazily when asked to, and :meth:`_set_list`
    replaces them wholesale, rejecting None but accepting an empty list to clear them.
    """

    def _get_list(self, attr_name: str, create: bool) -> list[Any] | None:
        values: list[Any] | None = getattr(self, attr_name)
        if values is None and create:
            values = []
            setattr(self, attr_name, values)
        return values

    def _set_list(
        self, attr_name: str, values: list[Any] | None, item_type: type | tuple[type, ...]
    ) -> None:
        if values is None:
            raise SDPInvalidArgument(f"Cannot set {attr_name} to None, use an empty list")
        if not isinstance(values, list):
            raise SDPInvalidArgument(
                f"Invalid {attr_name}: expected a list, got {type(values).__name__}"
            )
        for value in values:
            if not isinstance(value, item_type):
                raise SDPInvalidArgument(
                    f"Invalid item in {attr_name}: expected {_type_name(item_type)}, "
                    f"got {type(value).__name__}"
                )
        setattr(self, attr_name, values)

    def _set_singleton(
        self, attr_name: str, value: SDPField | None, field_type: type[SDPField]
    ) -> None:
        if value is None:
            raise SDPInvalidArgument(f"Cannot set {attr_name} to None")
        if not isinstance(value, field_type):
            raise SDPInvalidArgument(
                f"Invalid {attr_name}: expected {field_type.__name__}, "
                f"got {type(value).__name__}"
            )
        setattr(self, attr_name, value)

    @staticmethod
    def _copy_list(
        values: list[_T] | None, copier: Callable[[_T], _T]
    ) -> list[_T] | None:
        return None if values is None else [copier(value) for value in values]


class KeyedFieldsMixin(SDPSection, ABC):
    """
    Mixin for sections owning bandwidth and attribute lists, with keyed helpers.

    Keyed lookups return the value of the *first* entry matching the key, while keyed
    updates and removals apply to *every* matching entry. Updates never insert new entries.
    """

    bandwidths: list[SDPBandwidthField] | None
    attributes: list[SDPAttributeField] | None

    def get_bandwidths(self, create: bool = False) -> list[SDPBandwidthField] | None:
        """
        Return the bandwidth fields list.

        :param create: whether to create (and store) an empty list if it's absent.
        :return: the list, or None if it's absent and `create` is False.
        """
        return self._get_list("bandwidths", create)  # type: ignore[no-any-return]

    def set_bandwidths(self, bandwidths: list[SDPBandwidthField]) -> None:
        """Replace the bandwidth fields. An empty list clears them."""
        self._set_list("bandwidths", bandwidths, SDPBandwidthField)

    def get_attributes(self, create: bool = False) -> list[SDPAttributeField] | None:
        """
        Return the attribute fields list.

        :param create: whether to create (and store) an empty list if it's absent.
        :return: the list, or None if it's absent and `create` is False.
        """
        return self._get_list("attributes", create)  # type: ignore[no-any-return]

    def set_attributes(self, attributes: list[SDPAttributeField]) -> None:
        """Replace the attribute fields. An empty list clears them."""
        self._set_list("attributes", attributes, SDPAttributeField)

    def _matching_bandwidths(self, name: str) -> Iterator[SDPBandwidthField]:
        return (b for b in self.bandwidths or () if b.bwtype == name)

    def _matching_attributes(self, name: str) -> Iterator[SDPAttributeField]:
        return (a for a in self.attributes or () if a.name == name)

    def get_bandwidth(self, name: str | None) -> int | None:
        """Return the value of the first bandwidth field of the given type, if any."""
        if name is None:
            return None
        return next((b.bandwidth for b in self._matching_bandwidths(name)), None)

    def set_bandwidth(self, name: str, value: int) -> None:
        """Set the value of every bandwidth field of the given type."""
        if name is None or value is None:
            raise SDPInvalidArgument("Bandwidth type and value are required")
        for bandwidth in self._matching_bandwidths(name):
            bandwidth.bandwidth = value

    def remove_bandwidth(self, name: str | None) -> None:
        """Remove every bandwidth field of the given type."""
        if name is None or self.bandwidths is None:
            return
        self.bandwidths[:] = [b for b in self.bandwidths if b.bwtype != name]

    def get_attribute(self, name: str | None) -> str | None:
        """
        Return the value of the first attribute with the given name, if any.

        N.B. property attributes (flags) have no value, so they also return None.
        """
        if name is None:
            return None
        return next((a.value for a in self._matching_attributes(name)), None)

    def has_attribute(self, name: str) -> bool:
        """Whether at least one attribute with the given name is present."""
        return next(self._matching_attributes(name), None) is not None

    def set_attribute(self, name: str, value: str) -> None:
        """Set the value of every attribute with the given name."""
        if name is None or value is None:
            raise SDPInvalidArgument("Attribute name and value are required")
        for attribute in self._matching_attributes(name):
            attribute.value = value

    def remove_attribute(self, name: str | None) -> None:
        """Remove every attribute with the given name."""
        if name is None or self.attributes is None:
            return
        self.attributes[:] = [a for a in self.attributes if a.name != name]

    @property
    def typed_attributes(self) -> list[SDPAttribute]:
        """
        Typed views of all the attributes, in order.

        Attributes whose value doesn't match their typed view are kept as
        :class:`UnknownAttribute`, so that one malformed entry doesn't hide the others.
        """
        typed_attributes: list[SDPAttribute] = []
        for attribute_field in self.attributes or ():
            try:
                typed_attributes.append(attribute_field.attribute)
            except SDPParseError as e:
                _logger.debug(f"Keeping untyped attribute {attribute_field}: {e}")
                typed_attributes.append(
                    UnknownAttribute(attribute=attribute_field.name, value=attribute_field.value)
                )
        return typed_attributes


def _type_name(item_type: type | tuple[type, ...]) -> str:
    if isinstance(item_type, tuple):
        return " or ".join(t.__name__ for t in item_type)
    return item_type.__name__
