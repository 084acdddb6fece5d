"""Typed views over SDP attribute values."""

from __future__ import annotations

import enum
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Iterable, Union, cast

from typing_extensions import Self

from sdpmodel.exceptions import SDPParseError
from sdpmodel.helpers import (
    DEFAULT,
    DefaultType,
    RealValueMixin,
    OptionalStrValueMixin,
    ParseableSerializable,
    Registry,
    slots_dataclass,
)


__all__ = [
    "MediaFlowType",
    "SDPAttribute",
    "FlagAttribute",
    "ValueAttribute",
    "UnknownAttribute",
    "MediaFlowAttribute",
    "RecvOnlyFlag",
    "SendRecvFlag",
    "SendOnlyFlag",
    "InactiveFlag",
    "PTimeAttribute",
    "MaxPTimeAttribute",
    "RTPMapAttribute",
    "FMTPAttribute",
    "get_media_flow_attribute",
    "find_media_flow_type",
]


class MediaFlowType(enum.Enum):
    """Media flow direction, as declared by the flag attributes of :rfc:`8866#section-6.7`."""

    SENDRECV = "sendrecv"
    SENDONLY = "sendonly"
    RECVONLY = "recvonly"
    INACTIVE = "inactive"


@dataclass
class SDPAttribute(
    Registry[Union[str, DefaultType], "SDPAttribute"],
    ParseableSerializable,
    ABC,
    registry=True,
    registry_attr="_name",
):
    """
    Abstract base dataclass for typed views over ``a=`` attribute values.

    Concrete views are registered by their lowercase name. Names without a registered
    view are parsed into :class:`UnknownAttribute`, which is registered as ``DEFAULT``.
    """

    _name: ClassVar[str | DefaultType]
    # None means either form is accepted
    _is_flag: ClassVar[bool | None] = None

    @property
    def name(self) -> str:
        """The attribute name, as it appears before the colon."""
        if not isinstance(self._name, str):
            raise TypeError(f"{type(self).__name__} has no fixed name, it must override name")
        return self._name

    @property
    def is_flag(self) -> bool:
        """Whether this is a property attribute, i.e. one without a value."""
        return bool(self._is_flag)

    @classmethod
    def parse(cls, raw_data: str) -> Self:
        """Parse the text after ``a=``, i.e. ``<name>`` or ``<name>:<value>``."""
        name, sep, raw_value = raw_data.partition(":")
        return cls.from_name_value(name, raw_value if sep else None)

    @classmethod
    def from_name_value(cls, name: str, raw_value: str | None) -> Self:
        """
        Build the typed attribute registered for the given name.

        :param name: the attribute name, matched case-insensitively.
        :param raw_value: the attribute value, or None for property attributes.
        :return: the typed attribute, or an :class:`UnknownAttribute` if none is registered.
        """
        registry_name: str = name.lower()
        attr_cls: type[SDPAttribute] = cls.lookup(
            registry_name if registry_name in cls.get_registry() else DEFAULT
        )

        if attr_cls._is_flag and raw_value is not None:
            raise SDPParseError(f'Property attribute "{name}" takes no value, got "{raw_value}"')
        if attr_cls._is_flag is False and raw_value is None:
            raise SDPParseError(f'Value attribute "{name}" requires a value')

        try:
            return cast(Self, attr_cls.from_raw_value(name, raw_value))
        except SDPParseError:
            raise
        except (ValueError, TypeError) as e:
            raise SDPParseError(f'Invalid "{name}" attribute value: {raw_value}') from e

    @classmethod
    @abstractmethod
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:
        """
        Build the attribute from its name and (already split) value.

        :param name: the attribute name, as found in the field.
        :param raw_value: the attribute value, None for property attributes.
        """

    @abstractmethod
    def serialize(self) -> str:
        """Serialize the attribute value, i.e. the text after the colon."""

    def __str__(self) -> str:
        return self.name if self.is_flag else f"{self.name}:{self.serialize()}"


@dataclass
class FlagAttribute(SDPAttribute, ABC):
    """Abstract base dataclass for property attributes, which carry no value."""

    _is_flag: ClassVar[bool] = True

    @classmethod
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:  # noqa: D102
        return cls()

    def serialize(self) -> str:  # noqa: D102
        raise ValueError(f'Property attribute "{self.name}" has no value')


@dataclass
class ValueAttribute(SDPAttribute, ABC):
    """Abstract base dataclass for value attributes with a single ``value`` payload."""

    _is_flag: ClassVar[bool] = False

    value: Any

    @classmethod
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:  # noqa: D102
        if raw_value is None:
            raise SDPParseError(f'Value attribute "{name}" requires a value')
        # value mixins know how to convert the raw text
        if hasattr(cls, "parse_raw_value"):
            return cls(**cls.parse_raw_value(raw_value))
        return cls(value=raw_value)


@slots_dataclass
class UnknownAttribute(OptionalStrValueMixin, SDPAttribute):
    """Catch-all dataclass for attributes without a dedicated typed view."""

    _name = DEFAULT

    attribute: str

    @property
    def name(self) -> str:
        """The name of the attribute."""
        return self.attribute

    @property
    def is_flag(self) -> bool:
        """Unknown attributes are flags when they carry no value."""
        return self.value is None

    @classmethod
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:  # noqa: D102
        return cls(attribute=name, value=raw_value)


class MediaFlowAttribute(FlagAttribute, ABC):
    """Abstract base dataclass for SDP media flow attributes, defined in :rfc:`8866#section-6.7`."""

    @property
    def flow_type(self) -> MediaFlowType:
        """The media flow type declared by this attribute."""
        return MediaFlowType(self.name)


@slots_dataclass
class RecvOnlyFlag(MediaFlowAttribute):
    """
    SDP media flow attribute for recvonly, defined in :rfc:`8866#section-6.7.1`.

    Syntax::
        recvonly
    """

    _name = "recvonly"


@slots_dataclass
class SendRecvFlag(MediaFlowAttribute):
    """
    SDP media flow attribute for sendrecv, defined in :rfc:`8866#section-6.7.2`.

    Syntax::
        sendrecv
    """

    _name = "sendrecv"


@slots_dataclass
class SendOnlyFlag(MediaFlowAttribute):
    """
    SDP media flow attribute for sendonly, defined in :rfc:`8866#section-6.7.3`.

    Syntax::
        sendonly
    """

    _name = "sendonly"


@slots_dataclass
class InactiveFlag(MediaFlowAttribute):
    """
    SDP media flow attribute for inactive, defined in :rfc:`8866#section-6.7.4`.

    Syntax::
        inactive
    """

    _name = "inactive"


@slots_dataclass
class PTimeAttribute(RealValueMixin, ValueAttribute):
    """
    SDP media attribute for the packet time in milliseconds, defined in :rfc:`8866#section-6.4`.
    Fractional values are allowed.

    Syntax::
        ptime:<value>
    """

    _name = "ptime"


@slots_dataclass
class MaxPTimeAttribute(RealValueMixin, ValueAttribute):
    """
    SDP media attribute for the maximum packet time in milliseconds, defined in
    :rfc:`8866#section-6.5`. Fractional values are allowed.

    Syntax::
        maxptime:<value>
    """

    _name = "maxptime"


_RTPMAP_PATTERN = re.compile(
    r"(?P<payload_type>\d+)\s+(?P<encoding_name>[^/\s]+)/(?P<clock_rate>\d+)"
    r"(?:/(?P<encoding_parameters>\S+))?"
)


@slots_dataclass
class RTPMapAttribute(SDPAttribute):
    """
    SDP media attribute mapping an RTP payload type to an encoding, defined in
    :rfc:`8866#section-6.6`.

    Syntax::
        rtpmap:<payload type> <encoding name>/<clock rate>[/<encoding parameters>]
    """

    _name = "rtpmap"
    _is_flag = False

    payload_type: int
    encoding_name: str
    clock_rate: int
    encoding_parameters: str | None = None

    @property
    def channels(self) -> int | None:
        """Number of audio channels, if the encoding parameters declare them."""
        if self.encoding_parameters is None or not self.encoding_parameters.isdigit():
            return None
        return int(self.encoding_parameters)

    @classmethod
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:  # noqa: D102
        match = _RTPMAP_PATTERN.fullmatch((raw_value or "").strip())
        if match is None:
            raise SDPParseError(f"Invalid rtpmap value: {raw_value}")
        return cls(
            payload_type=int(match["payload_type"]),
            encoding_name=match["encoding_name"],
            clock_rate=int(match["clock_rate"]),
            encoding_parameters=match["encoding_parameters"],
        )

    def serialize(self) -> str:  # noqa: D102
        encoding = [self.encoding_name, str(self.clock_rate)]
        if self.encoding_parameters is not None:
            encoding.append(self.encoding_parameters)
        return f"{self.payload_type} {'/'.join(encoding)}"


@slots_dataclass
class FMTPAttribute(SDPAttribute):
    """
    SDP media attribute carrying format specific parameters, defined in
    :rfc:`8866#section-6.15`.

    Syntax::
        fmtp:<format> <format specific parameters>
    """

    _name = "fmtp"
    _is_flag = False

    format: str
    parameters: str

    @classmethod
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:  # noqa: D102
        format_, _, parameters = (raw_value or "").strip().partition(" ")
        if not format_ or not parameters:
            raise SDPParseError(f"Invalid fmtp value: {raw_value}")
        return cls(format=format_, parameters=parameters.strip())

    def serialize(self) -> str:  # noqa: D102
        return f"{self.format} {self.parameters}"


def get_media_flow_attribute(flow_type: MediaFlowType) -> MediaFlowAttribute:
    """Return a new media flow attribute for the given media flow type."""
    return cast(MediaFlowAttribute, SDPAttribute.from_name_value(flow_type.value, None))


def find_media_flow_type(attributes: Iterable[SDPAttribute]) -> MediaFlowType | None:
    """Return the media flow type declared among the given attributes, if any."""
    media_flow_type: MediaFlowType | None = None
    for attribute in attributes:
        if isinstance(attribute, MediaFlowAttribute):
            if media_flow_type is not None:
                raise SDPParseError("Multiple media flow attributes in the same section")
            media_flow_type = attribute.flow_type
    return media_flow_type
