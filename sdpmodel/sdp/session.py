"""SDP session description, the root of the SDP model."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field as dataclass_field
from typing import Iterable, TypeVar

from typing_extensions import Self

from sdpmodel.constants import SDP_ENCODING, SDP_MIMETYPE

from .attributes import MediaFlowType, find_media_flow_type
from .common import KeyedFieldsMixin
from .fields import (
    SDPAttributeField,
    SDPBandwidthField,
    SDPConnectionField,
    SDPEmailField,
    SDPField,
    SDPInformationField,
    SDPKeyField,
    SDPOriginField,
    SDPPhoneField,
    SDPSessionNameField,
    SDPURIField,
    SDPVersionField,
    SDPZoneField,
)
from .media import SDPMedia
from .serializer import serialize_session
from .time import SDPTime


__all__ = [
    "SDPSession",
]


_logger = logging.getLogger(__name__)

_F = TypeVar("_F", bound=SDPField)


@dataclass
class SDPSession(KeyedFieldsMixin):
    """
    SDP section for session description fields, defined in :rfc:`8866#section-5`.

    Sessions start out empty and are normally populated field by field through
    :class:`~sdpmodel.sdp.assembler.SDPSessionAssembler`, in arrival order.
    Repeating a singleton field replaces the previous one.
    """

    version: SDPVersionField | None = None
    origin: SDPOriginField | None = None
    name: SDPSessionNameField | None = None
    information: SDPInformationField | None = None
    uri: SDPURIField | None = None
    emails: list[SDPEmailField] | None = dataclass_field(default_factory=list)
    phones: list[SDPPhoneField] | None = dataclass_field(default_factory=list)
    connection: SDPConnectionField | None = None
    bandwidths: list[SDPBandwidthField] | None = dataclass_field(default_factory=list)
    time_descriptions: list[SDPTime] | None = dataclass_field(default_factory=list)
    zone_adjustments: list[SDPZoneField] | None = dataclass_field(default_factory=list)
    key: SDPKeyField | None = None
    attributes: list[SDPAttributeField] | None = dataclass_field(default_factory=list)
    media_descriptions: list[SDPMedia] | None = dataclass_field(default_factory=list)

    @property
    def mimetype(self) -> str:
        """The mimetype of the SDP session data. Always ``application/sdp``."""
        return SDP_MIMETYPE

    @property
    def is_complete(self) -> bool:
        """Whether the mandatory version, origin and session name fields are all present."""
        return None not in (self.version, self.origin, self.name)

    def set_version(self, version: SDPVersionField) -> None:
        """Replace the version field."""
        self._set_singleton("version", version, SDPVersionField)

    def set_origin(self, origin: SDPOriginField) -> None:
        """Replace the origin field."""
        self._set_singleton("origin", origin, SDPOriginField)

    def set_name(self, name: SDPSessionNameField) -> None:
        """Replace the session name field."""
        self._set_singleton("name", name, SDPSessionNameField)

    def set_information(self, information: SDPInformationField) -> None:
        """Replace the session-level information field."""
        self._set_singleton("information", information, SDPInformationField)

    def set_uri(self, uri: SDPURIField) -> None:
        """Replace the URI field."""
        self._set_singleton("uri", uri, SDPURIField)

    def set_connection(self, connection: SDPConnectionField) -> None:
        """Replace the session-level connection field."""
        self._set_singleton("connection", connection, SDPConnectionField)

    def set_key(self, key: SDPKeyField) -> None:
        """Replace the session-level encryption key field."""
        self._set_singleton("key", key, SDPKeyField)

    def get_emails(self, create: bool = False) -> list[SDPEmailField] | None:
        """Return the email fields, creating an empty list if absent and `create` is True."""
        return self._get_list("emails", create)

    def set_emails(self, emails: list[SDPEmailField]) -> None:
        """Replace the email fields. An empty list clears them."""
        self._set_list("emails", emails, SDPEmailField)

    def get_phones(self, create: bool = False) -> list[SDPPhoneField] | None:
        """Return the phone fields, creating an empty list if absent and `create` is True."""
        return self._get_list("phones", create)

    def set_phones(self, phones: list[SDPPhoneField]) -> None:
        """Replace the phone fields. An empty list clears them."""
        self._set_list("phones", phones, SDPPhoneField)

    def get_time_descriptions(self, create: bool = False) -> list[SDPTime] | None:
        """Return the time descriptions, creating an empty list if absent and `create` is True."""
        return self._get_list("time_descriptions", create)

    def set_time_descriptions(self, time_descriptions: list[SDPTime]) -> None:
        """Replace the time descriptions. An empty list clears them."""
        self._set_list("time_descriptions", time_descriptions, SDPTime)

    def get_zone_adjustments(self, create: bool = False) -> list[SDPZoneField] | None:
        """Return the zone fields, creating an empty list if absent and `create` is True."""
        return self._get_list("zone_adjustments", create)

    def set_zone_adjustments(self, zone_adjustments: list[SDPZoneField]) -> None:
        """Replace the zone fields. An empty list clears them."""
        self._set_list("zone_adjustments", zone_adjustments, SDPZoneField)

    def get_media_descriptions(self, create: bool = False) -> list[SDPMedia] | None:
        """Return the media descriptions, creating an empty list if absent and `create` is True."""
        return self._get_list("media_descriptions", create)

    def set_media_descriptions(self, media_descriptions: list[SDPMedia]) -> None:
        """Replace the media descriptions. An empty list clears them."""
        self._set_list("media_descriptions", media_descriptions, SDPMedia)

    @staticmethod
    def _effective(media_value: _F | None, session_value: _F | None) -> _F | None:
        return media_value if media_value is not None else session_value

    def effective_connection(self, media: SDPMedia) -> SDPConnectionField | None:
        """The connection field that applies to the given media description."""
        return self._effective(media.connection, self.connection)

    def effective_key(self, media: SDPMedia) -> SDPKeyField | None:
        """The encryption key field that applies to the given media description."""
        return self._effective(media.key, self.key)

    def effective_information(self, media: SDPMedia) -> SDPInformationField | None:
        """The information field that applies to the given media description."""
        return self._effective(media.information, self.information)

    @property
    def media_flow_type(self) -> MediaFlowType | None:
        """The session-level media flow type, if any."""
        return find_media_flow_type(self.typed_attributes)

    @property
    def connection_address(self) -> tuple[str, int] | None:
        """The advertised connection address and port to be used for media streams, if any."""
        addresses: list[tuple[str, int]] = [
            (connection.address, media.media.port)
            for media in self.media_descriptions or ()
            if (connection := self.effective_connection(media))
        ]
        if not addresses:
            return None
        if len(addresses) > 1:
            _logger.warning(
                "Multiple connection addresses found in SDP session, returning first one"
            )
        return addresses[0]

    def copy(self) -> SDPSession:
        """
        Return a deep copy of the session.

        Every field, list, time description and media description is copied, so that
        nothing is shared with the original. Absent lists stay absent.
        """
        return SDPSession(
            version=self.version.copy() if self.version else None,
            origin=self.origin.copy() if self.origin else None,
            name=self.name.copy() if self.name else None,
            information=self.information.copy() if self.information else None,
            uri=self.uri.copy() if self.uri else None,
            emails=self._copy_list(self.emails, SDPEmailField.copy),
            phones=self._copy_list(self.phones, SDPPhoneField.copy),
            connection=self.connection.copy() if self.connection else None,
            bandwidths=self._copy_list(self.bandwidths, SDPBandwidthField.copy),
            time_descriptions=self._copy_list(self.time_descriptions, SDPTime.copy),
            zone_adjustments=self._copy_list(self.zone_adjustments, SDPZoneField.copy),
            key=self.key.copy() if self.key else None,
            attributes=self._copy_list(self.attributes, SDPAttributeField.copy),
            media_descriptions=self._copy_list(self.media_descriptions, SDPMedia.copy),
        )

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> Self:
        """
        Parse an SDP session from its lines.

        :param lines: the SDP lines, without line terminators. Blank lines are skipped.
        :return: the parsed SDP session.
        """
        from .assembler import SDPSessionAssembler

        assembler = SDPSessionAssembler(cls())
        for line in lines:
            if not line.strip():
                continue
            assembler.attach(SDPField.parse(line))
        return assembler.session  # type: ignore[return-value]

    @classmethod
    def parse(cls, raw_value: bytes | str) -> Self:
        """Parse an SDP session from its text (or encoded bytes)."""
        if isinstance(raw_value, bytes):
            raw_value = raw_value.decode(SDP_ENCODING)
        # only CRLF or LF end a line, other line breaks may be part of text values
        return cls.from_lines(line.removesuffix("\r") for line in raw_value.split("\n"))

    def serialize(self) -> bytes:
        """Serialize the SDP session to encoded bytes."""
        return str(self).encode(SDP_ENCODING)

    def __str__(self) -> str:
        """Serialize the SDP session to canonical SDP text."""
        return serialize_session(self)
