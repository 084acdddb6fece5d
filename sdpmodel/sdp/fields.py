"""SDP field kinds, one dataclass per protocol line type."""

from __future__ import annotations

import enum
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, fields as dataclass_fields, replace as dataclass_replace
from typing import Any, ClassVar, Union, cast

from typing_extensions import Self, TypeAlias, override

from sdpmodel.constants import LINE_TERMINATOR, SUPPORTED_SDP_VERSIONS, TIME_UNITS
from sdpmodel.exceptions import (
    SDPException,
    SDPFieldEncodingError,
    SDPInvalidArgument,
    SDPParseError,
    SDPUnknownFieldError,
    SDPUnsupportedVersion,
)
from sdpmodel.helpers import (
    FieldsParser,
    FieldsParserSerializer,
    ParseableSerializable,
    Registry,
    StrValueMixin,
    slots_dataclass,
)

from .attributes import SDPAttribute


__all__ = [
    "SDPFieldKind",
    "SDPField",
    "SDPVersionField",
    "SDPOriginField",
    "SDPSessionNameField",
    "SDPInformationField",
    "SDPURIField",
    "SDPEmailField",
    "SDPPhoneField",
    "SDPConnectionField",
    "SDPBandwidthField",
    "SDPTimeField",
    "SDPRepeatField",
    "SDPTimezoneAdjustment",
    "SDPZoneField",
    "SDPKeyField",
    "SDPAttributeField",
    "SDPMediaField",
    "AnySDPField",
    "parse_typed_time",
]


class SDPFieldKind(enum.Enum):
    """The kind of an SDP field, valued by its one-letter type."""

    VERSION = "v"
    ORIGIN = "o"
    SESSION_NAME = "s"
    INFORMATION = "i"
    URI = "u"
    EMAIL = "e"
    PHONE = "p"
    CONNECTION = "c"
    BANDWIDTH = "b"
    TIME = "t"
    REPEAT = "r"
    ZONE = "z"
    KEY = "k"
    ATTRIBUTE = "a"
    MEDIA = "m"


@dataclass
class SDPField(
    Registry[str, "SDPField"],
    ParseableSerializable,
    ABC,
    registry=True,
    registry_attr="_type",
):
    """
    Abstract base dataclass for SDP fields.

    Each concrete subclass represents one kind of protocol line (``<type>=<value>``),
    and is registered by its one-letter type for :meth:`parse` to classify raw lines.
    """

    _type: ClassVar[str]
    _description: ClassVar[str]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)

        # make sure non-abstract fields describe themselves
        if ABC not in cls.__bases__ and not getattr(cls, "_description", None):
            raise ValueError(f"SDPField class {cls} must have a _description attribute")

    @property
    def type(self) -> str:
        """The type of the field."""
        return self._type

    @property
    def kind(self) -> SDPFieldKind:
        """The kind of the field."""
        return SDPFieldKind(self._type)

    @classmethod
    def parse(cls, raw_data: str) -> Self:
        """
        Classify a raw SDP line into the field object of the matching kind.

        :param raw_data: a single SDP line, without line terminator.
        :return: the parsed field.
        :raises SDPUnknownFieldError: if the line type is not a known field type.
        :raises SDPParseError: if the line value is malformed.
        """
        line = raw_data.rstrip("\r\n")
        if "=" not in line:
            raise SDPParseError(f"Invalid SDP line: {raw_data!r}")
        field_type, raw_value = line.split("=", 1)

        try:
            field_cls = cls.lookup(field_type)
        except KeyError:
            raise SDPUnknownFieldError(f"Unknown SDP field type {field_type}")  # noqa: B904

        try:
            return cast(
                Self, field_cls.from_raw_value(field_type=field_type, raw_value=raw_value)
            )
        except SDPException:
            raise
        except (ValueError, TypeError) as e:
            raise SDPParseError(f"Invalid {field_cls.__name__} value: {raw_value}") from e

    @classmethod
    def from_raw_value(cls, field_type: str, raw_value: str) -> Self:
        """
        Parse the raw value of the field into a field object.

        :param field_type: the field type
        :param raw_value: the raw value of the field
        :return: the field object.
        """
        if issubclass(cls, FieldsParser):
            return cls(**cls.parse_raw_value(raw_value))
        raise NotImplementedError

    @abstractmethod
    def serialize(self) -> str:
        """
        Serialize the field value to a string.

        :return: The serialized field value string.
        """

    def _validate(self) -> None:
        """Check the kind-specific payload. Raises ValueError or TypeError on failure."""

    def validate(self) -> None:
        """
        Check that the field payload can be encoded.

        :raises SDPFieldEncodingError: if the payload is invalid.
        """
        try:
            for field in dataclass_fields(self):
                value = getattr(self, field.name)
                if isinstance(value, str) and ("\r" in value or "\n" in value):
                    raise ValueError(f"Line breaks are not allowed in {field.name}")
            self._validate()
        except (ValueError, TypeError) as e:
            raise SDPFieldEncodingError(
                f"Invalid {self.kind.name.lower()} field: {e}", field=self
            ) from e

    def encode(self) -> str:
        """
        Encode the field as a complete SDP line, including the line terminator.

        :raises SDPFieldEncodingError: if the payload is invalid or can't be serialized.
        """
        self.validate()
        try:
            return f"{self}{LINE_TERMINATOR}"
        except (ValueError, TypeError, AttributeError) as e:
            raise SDPFieldEncodingError(
                f"Cannot encode {self.kind.name.lower()} field: {e}", field=self
            ) from e

    def copy(self) -> Self:
        """Return a deep copy of the field."""
        return dataclass_replace(self)

    def __str__(self) -> str:
        return f"{self.type}={self.serialize()}"


@slots_dataclass
class SDPVersionField(StrValueMixin, SDPField):
    """
    SDP version field, defined in :rfc:`8866#section-5.1`.

    Syntax::
        v=0
    """

    _type = "v"
    _description = "protocol version"

    @classmethod
    @override
    def from_raw_value(cls, field_type: str, raw_value: str) -> Self:
        if raw_value not in SUPPORTED_SDP_VERSIONS:
            raise SDPUnsupportedVersion(f"Unsupported SDP version {raw_value}")
        return cls(value=raw_value)

    def _validate(self) -> None:
        if self.value not in SUPPORTED_SDP_VERSIONS:
            raise ValueError(f"Unsupported SDP version {self.value}")


@slots_dataclass
class SDPOriginField(SDPField):
    """
    SDP origin field, defined in :rfc:`8866#section-5.2`.

    Syntax::
        o=<username> <sess-id> <sess-version> <nettype> <addrtype> <unicast-address>
    """

    _type = "o"
    _description = "originator and session identifier"

    username: str
    sess_id: str
    sess_version: str
    nettype: str
    addrtype: str
    unicast_address: str

    @classmethod
    @override
    def from_raw_value(cls, field_type: str, raw_value: str) -> Self:
        (
            username,
            sess_id,
            sess_version,
            nettype,
            addrtype,
            unicast_address,
        ) = raw_value.split(" ")
        return cls(
            username=username,
            sess_id=sess_id,
            sess_version=sess_version,
            nettype=nettype,
            addrtype=addrtype,
            unicast_address=unicast_address,
        )

    def _validate(self) -> None:
        for value in (
            self.username,
            self.sess_id,
            self.sess_version,
            self.nettype,
            self.addrtype,
            self.unicast_address,
        ):
            if not value or " " in str(value):
                raise ValueError(f"Origin subfields must be non-empty tokens: {value!r}")

    def serialize(self) -> str:  # noqa: D102
        return " ".join((
            str(self.username),
            str(self.sess_id),
            str(self.sess_version),
            str(self.nettype),
            str(self.addrtype),
            str(self.unicast_address),
        ))


@slots_dataclass
class SDPSessionNameField(StrValueMixin, SDPField):
    """
    SDP session name field, defined in :rfc:`8866#section-5.3`.

    Syntax::
        s=<session name>
    """

    _type = "s"
    _description = "session name"


@slots_dataclass
class SDPInformationField(StrValueMixin, SDPField):
    """
    SDP information field, defined in :rfc:`8866#section-5.4`.
    Used both as session information and as media title.

    Syntax::
        i=<session description>
    """

    _type = "i"
    _description = "session information or media title"


@slots_dataclass
class SDPURIField(StrValueMixin, SDPField):
    """
    SDP URI field, defined in :rfc:`8866#section-5.5`.

    Syntax::
        u=<uri>
    """

    _type = "u"
    _description = "URI of description"


@slots_dataclass
class SDPEmailField(StrValueMixin, SDPField):
    """
    SDP email field, defined in :rfc:`8866#section-5.6`.

    Syntax::
        e=<email-address>
    """

    _type = "e"
    _description = "email address"


@slots_dataclass
class SDPPhoneField(StrValueMixin, SDPField):
    """
    SDP phone field, defined in :rfc:`8866#section-5.6`.

    Syntax::
        p=<phone-number>
    """

    _type = "p"
    _description = "phone number"


@slots_dataclass
class SDPConnectionField(SDPField):
    """
    SDP connection field, defined in :rfc:`8866#section-5.7`.

    Syntax::
        c=<nettype> <addrtype> <connection-address>
    """

    _type = "c"
    _description = "connection information"

    nettype: str
    addrtype: str
    address: str
    ttl: int | None = None
    number_of_addresses: int | None = None

    @property
    def connection_address(self) -> str:
        """The connection address as string, with optional TTL and number of addresses."""
        parts = [self.address]
        if self.ttl is not None:
            parts.append(str(self.ttl))
        if self.number_of_addresses is not None:
            parts.append(str(self.number_of_addresses))
        return "/".join(parts)

    @classmethod
    @override
    def from_raw_value(cls, field_type: str, raw_value: str) -> Self:
        nettype, addrtype, connection_address = raw_value.split(" ")
        # IPv6 multicast addresses have no TTL, so the only suffix is the number of addresses
        address, *rest = connection_address.split("/")
        ttl = number_of_addresses = None
        if addrtype == "IP6":
            if len(rest) > 1:
                raise SDPParseError(f"Invalid connection address {connection_address}")
            if rest:
                number_of_addresses = int(rest[0])
        else:
            if len(rest) > 2:
                raise SDPParseError(f"Invalid connection address {connection_address}")
            if rest:
                ttl = int(rest[0])
            if len(rest) == 2:
                number_of_addresses = int(rest[1])
        return cls(
            nettype=nettype,
            addrtype=addrtype,
            address=address,
            ttl=ttl,
            number_of_addresses=number_of_addresses,
        )

    def _validate(self) -> None:
        if not self.nettype or not self.addrtype or not self.address:
            raise ValueError("Connection nettype, addrtype and address are required")
        if self.ttl is not None and self.addrtype == "IP6":
            raise ValueError("IP6 connection addresses have no TTL")
        if self.ttl is not None and not 0 <= self.ttl <= 255:
            raise ValueError(f"TTL must be within 0-255 (got {self.ttl})")
        if self.number_of_addresses is not None and self.number_of_addresses < 1:
            raise ValueError(
                f"Number of addresses must be positive (got {self.number_of_addresses})"
            )

    def serialize(self) -> str:  # noqa: D102
        return " ".join((self.nettype, self.addrtype, self.connection_address))  # noqa: FLY002


@slots_dataclass
class SDPBandwidthField(SDPField):
    """
    SDP bandwidth field, defined in :rfc:`8866#section-5.8`.

    Syntax::
        b=<bwtype>:<bandwidth>
    """

    _type = "b"
    _description = "bandwidth information"

    bwtype: str
    bandwidth: int

    @classmethod
    @override
    def from_raw_value(cls, field_type: str, raw_value: str) -> Self:
        bwtype, bandwidth = raw_value.split(":")
        return cls(bwtype=bwtype, bandwidth=int(bandwidth))

    def _validate(self) -> None:
        if not self.bwtype or ":" in self.bwtype:
            raise ValueError(f"Invalid bandwidth type {self.bwtype!r}")
        if not isinstance(self.bandwidth, int) or self.bandwidth < 0:
            raise ValueError(f"Bandwidth must be a non-negative int (got {self.bandwidth!r})")

    def serialize(self) -> str:  # noqa: D102
        return f"{self.bwtype}:{self.bandwidth}"


@slots_dataclass
class SDPTimeField(SDPField):
    """
    SDP time field, defined in :rfc:`8866#section-5.9`.

    Syntax::
        t=<start-time> <stop-time>
    """

    _type = "t"
    _description = "time the session is active"

    start_time: int
    stop_time: int

    @property
    def is_permanent(self) -> bool:
        """Whether the session is unbounded (both times are zero)."""
        return self.start_time == 0 and self.stop_time == 0

    @classmethod
    @override
    def from_raw_value(cls, field_type: str, raw_value: str) -> Self:
        start_time, stop_time = raw_value.split(" ")
        return cls(start_time=int(start_time), stop_time=int(stop_time))

    def _validate(self) -> None:
        if self.start_time < 0 or self.stop_time < 0:
            raise ValueError("Start and stop times must be non-negative")

    def serialize(self) -> str:  # noqa: D102
        return f"{self.start_time} {self.stop_time}"


def parse_typed_time(time_str: str) -> int:
    """
    Parse a typed time value (e.g. ``7d``, ``-1h``, ``3600``) into seconds.

    :param time_str: the time value, optionally suffixed by one of ``d h m s``.
    :return: the number of seconds.
    """
    match = re.fullmatch(rf"(-?\d+)([{''.join(TIME_UNITS)}])?", time_str)
    if not match:
        raise SDPParseError(f'Invalid time string "{time_str}"')
    time, unit = match.groups()
    return int(time) * TIME_UNITS[unit or "s"]


@slots_dataclass
class SDPRepeatField(SDPField):
    """
    SDP repeat times field, defined in :rfc:`8866#section-5.10`.

    Syntax::
        r=<repeat interval> <active duration> <offsets from start-time>
    """

    _type = "r"
    _description = "repeat times"

    interval: int
    duration: int
    offsets: list[int]

    @classmethod
    @override
    def from_raw_value(cls, field_type: str, raw_value: str) -> Self:
        interval, duration, *offsets = raw_value.split(" ")
        return cls(
            interval=parse_typed_time(interval),
            duration=parse_typed_time(duration),
            offsets=[parse_typed_time(offset) for offset in offsets],
        )

    def _validate(self) -> None:
        if self.interval <= 0:
            raise ValueError(f"Repeat interval must be positive (got {self.interval})")
        if self.duration < 0:
            raise ValueError(f"Active duration must be non-negative (got {self.duration})")
        if not self.offsets:
            raise ValueError("Repeat field requires at least one offset")

    def copy(self) -> Self:  # noqa: D102
        return dataclass_replace(self, offsets=list(self.offsets))

    def serialize(self) -> str:  # noqa: D102
        return " ".join(str(value) for value in (self.interval, self.duration, *self.offsets))


@slots_dataclass
class SDPTimezoneAdjustment(FieldsParserSerializer):
    """
    SDP timezone adjustment, as part of definition in :rfc:`8866#section-5.11`.

    Syntax::
        <adjustment time> <offset>
    """

    adjustment_time: int
    offset: str

    @classmethod
    def from_raw_value(cls, raw_value: str) -> Self:  # noqa: D102
        return cls(**cls.parse_raw_value(raw_value))

    @classmethod
    def parse_raw_value(cls, raw_value: str) -> dict[str, Any]:  # noqa: D102
        adjustment_time, offset = raw_value.split(" ")
        parse_typed_time(offset)  # only checks the syntax, the offset is kept as-is
        return dict(adjustment_time=int(adjustment_time), offset=offset)

    def serialize(self) -> str:  # noqa: D102
        return f"{self.adjustment_time} {self.offset}"

    def __str__(self) -> str:
        return self.serialize()


@slots_dataclass
class SDPZoneField(SDPField, FieldsParserSerializer):
    """
    SDP time zone adjustments field, defined in :rfc:`8866#section-5.11`.

    Syntax::
        z=<adjustment time> <offset> <adjustment time> <offset> ....
    """

    _type = "z"
    _description = "time zone adjustments"

    adjustments: list[SDPTimezoneAdjustment]

    @classmethod
    def parse_raw_value(cls, raw_value: str) -> dict[str, Any]:  # noqa: D102
        split_values = raw_value.split(" ")
        if len(split_values) % 2 != 0:
            raise SDPParseError(
                f"Number of values in timezone field is not even (got {len(split_values)}): "
                f"{raw_value}"
            )
        adjustments = [
            SDPTimezoneAdjustment.from_raw_value(f"{adjustment_time} {offset}")
            for adjustment_time, offset in zip(split_values[::2], split_values[1::2])
        ]
        return dict(adjustments=adjustments)

    def _validate(self) -> None:
        if not self.adjustments:
            raise ValueError("Zone field requires at least one adjustment")
        for adjustment in self.adjustments:
            if not isinstance(adjustment, SDPTimezoneAdjustment):
                raise TypeError(f"Invalid timezone adjustment {adjustment!r}")

    def copy(self) -> Self:  # noqa: D102
        return dataclass_replace(
            self, adjustments=[dataclass_replace(adj) for adj in self.adjustments]
        )

    def serialize(self) -> str:  # noqa: D102
        return " ".join(str(adjustment) for adjustment in self.adjustments)


@slots_dataclass
class SDPKeyField(SDPField):
    """
    SDP encryption key field, defined in :rfc:`8866#section-5.12`.

    Syntax::
        k=<method>
        k=<method>:<encryption key>
    """

    _type = "k"
    _description = "encryption key"

    method: str
    key: str | None = None

    @classmethod
    @override
    def from_raw_value(cls, field_type: str, raw_value: str) -> Self:
        method: str
        key: str | None
        method, key = raw_value.split(":", 1) if ":" in raw_value else (raw_value, None)  # type: ignore[assignment]
        return cls(method=method, key=key)

    def _validate(self) -> None:
        if not self.method:
            raise ValueError("Key method is required")

    def serialize(self) -> str:  # noqa: D102
        return f"{self.method}:{self.key}" if self.key is not None else self.method


@slots_dataclass
class SDPAttributeField(SDPField):
    """
    SDP attribute field, defined in :rfc:`8866#section-5.13`.

    Syntax::
        a=<attribute>
        a=<attribute>:<value>
    """

    _type = "a"
    _description = "attribute"

    name: str
    value: str | None = None

    @property
    def is_flag(self) -> bool:
        """Whether the attribute is a property attribute (no value) or not."""
        return self.value is None

    @property
    def attribute(self) -> SDPAttribute:
        """A typed view of the attribute, parsed from its name and value."""
        return SDPAttribute.from_name_value(self.name, self.value)

    @classmethod
    def from_attribute(cls, attribute: SDPAttribute) -> Self:
        """Build an attribute field from a typed attribute."""
        return cls(
            name=attribute.name,
            value=None if attribute.is_flag else attribute.serialize(),
        )

    @classmethod
    @override
    def from_raw_value(cls, field_type: str, raw_value: str) -> Self:
        name: str
        value: str | None
        name, value = raw_value.split(":", 1) if ":" in raw_value else (raw_value, None)  # type: ignore[assignment]
        if not name:
            raise SDPParseError(f"Attribute without name: {raw_value}")
        return cls(name=name, value=value)

    def _validate(self) -> None:
        if not self.name or ":" in self.name:
            raise ValueError(f"Invalid attribute name {self.name!r}")

    def serialize(self) -> str:  # noqa: D102
        return f"{self.name}:{self.value}" if self.value is not None else self.name


@slots_dataclass
class SDPMediaField(SDPField):
    """
    SDP media field, defined in :rfc:`8866#section-5.14`.

    Syntax::
        m=<media> <port> <proto> <fmt> ...
        m=<media> <port>/<number of ports> <proto> <fmt> ...
    """

    _type = "m"
    _description = "media name and transport address"

    media: str
    port: int
    number_of_ports: int | None
    protocol: str
    formats: list[str]

    @property
    def rtcp_port(self) -> int:
        """RTCP port, which is the media port + 1."""
        return self.port + 1

    def set_media_type(self, media_type: str) -> None:
        """Set the media type (e.g. ``audio``)."""
        if media_type is None:
            raise SDPInvalidArgument("The media type is None")
        self.media = media_type

    def set_port(self, port: int) -> None:
        """Set the transport port."""
        if port is None or port < 0:
            raise SDPInvalidArgument(f"Invalid media port {port!r}")
        self.port = port

    def set_port_count(self, port_count: int | None) -> None:
        """Set the number of ports, or None to leave it unspecified."""
        if port_count is not None and port_count < 0:
            raise SDPInvalidArgument(f"Invalid media port count {port_count!r}")
        self.number_of_ports = port_count

    def set_protocol(self, protocol: str) -> None:
        """Set the transport protocol (e.g. ``RTP/AVP``)."""
        if protocol is None:
            raise SDPInvalidArgument("The protocol is None")
        self.protocol = protocol

    def get_formats(self, create: bool = False) -> list[str] | None:
        """Return the media formats, or None if there are none and `create` is False."""
        if not create and not self.formats:
            return None
        return self.formats

    def set_formats(self, formats: list[str]) -> None:
        """Replace the media formats."""
        if formats is None:
            raise SDPInvalidArgument("The media formats are None")
        self.formats = formats

    @classmethod
    @override
    def from_raw_value(cls, field_type: str, raw_value: str) -> Self:
        media, ports_spec, protocol, *formats = raw_value.split(" ")
        port_str, _, number_of_ports_str = ports_spec.partition("/")
        return cls(
            media=media,
            port=int(port_str),
            number_of_ports=int(number_of_ports_str) if number_of_ports_str else None,
            protocol=protocol,
            formats=formats,
        )

    def _validate(self) -> None:
        if not self.media or not self.protocol:
            raise ValueError("Media type and protocol are required")
        if not isinstance(self.port, int) or self.port < 0:
            raise ValueError(f"Invalid media port {self.port!r}")
        if self.number_of_ports is not None and self.number_of_ports < 0:
            raise ValueError(f"Invalid media port count {self.number_of_ports!r}")
        for fmt in self.formats:
            if not fmt or " " in str(fmt):
                raise ValueError(f"Invalid media format {fmt!r}")

    def copy(self) -> Self:  # noqa: D102
        return dataclass_replace(self, formats=list(self.formats))

    def serialize(self) -> str:  # noqa: D102
        ports_spec = str(self.port)
        if self.number_of_ports is not None:
            ports_spec += f"/{self.number_of_ports}"
        return " ".join((self.media, ports_spec, self.protocol, *map(str, self.formats)))


AnySDPField: TypeAlias = Union[
    SDPVersionField,
    SDPOriginField,
    SDPSessionNameField,
    SDPInformationField,
    SDPURIField,
    SDPEmailField,
    SDPPhoneField,
    SDPConnectionField,
    SDPBandwidthField,
    SDPTimeField,
    SDPRepeatField,
    SDPZoneField,
    SDPKeyField,
    SDPAttributeField,
    SDPMediaField,
]
