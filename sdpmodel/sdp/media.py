"""SDP media description section."""

from __future__ import annotations

from dataclasses import dataclass

from sdpmodel.exceptions import SDPInvalidArgument

from .attributes import MediaFlowType, RTPMapAttribute, find_media_flow_type
from .common import KeyedFieldsMixin
from .fields import (
    SDPAttributeField,
    SDPBandwidthField,
    SDPConnectionField,
    SDPInformationField,
    SDPKeyField,
    SDPMediaField,
)
from .serializer import serialize_media


__all__ = [
    "SDPMedia",
]


@dataclass
class SDPMedia(KeyedFieldsMixin):
    """
    SDP section for media description fields, defined in :rfc:`8866#section-5.14`.

    The optional fields and lists are owned by the media description itself, and are
    never copied from the session: when absent, the session-level value applies
    (see :meth:`SDPSession.effective_connection` and siblings).
    """

    media: SDPMediaField
    information: SDPInformationField | None = None
    connection: SDPConnectionField | None = None
    bandwidths: list[SDPBandwidthField] | None = None
    key: SDPKeyField | None = None
    attributes: list[SDPAttributeField] | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.media, SDPMediaField):
            raise SDPInvalidArgument(
                f"Media description requires a media field, got {self.media!r}"
            )

    @property
    def title(self) -> SDPInformationField | None:
        """The media title, i.e. the media-level information field."""
        return self.information

    def set_media(self, media: SDPMediaField) -> None:
        """Replace the media field."""
        self._set_singleton("media", media, SDPMediaField)

    def set_information(self, information: SDPInformationField) -> None:
        """Replace the media-level information field."""
        self._set_singleton("information", information, SDPInformationField)

    def set_connection(self, connection: SDPConnectionField) -> None:
        """Replace the media-level connection field."""
        self._set_singleton("connection", connection, SDPConnectionField)

    def set_key(self, key: SDPKeyField) -> None:
        """Replace the media-level encryption key field."""
        self._set_singleton("key", key, SDPKeyField)

    @property
    def media_flow_type(self) -> MediaFlowType | None:
        """Media flow type, extracted from the media attributes."""
        return find_media_flow_type(self.typed_attributes)

    @property
    def rtpmaps(self) -> list[RTPMapAttribute]:
        """The rtpmap attributes of the media description, in order."""
        return [
            attribute
            for attribute in self.typed_attributes
            if isinstance(attribute, RTPMapAttribute)
        ]

    def copy(self) -> SDPMedia:
        """Return a deep copy of the media description."""
        return SDPMedia(
            media=self.media.copy(),
            information=self.information.copy() if self.information else None,
            connection=self.connection.copy() if self.connection else None,
            bandwidths=self._copy_list(self.bandwidths, SDPBandwidthField.copy),
            key=self.key.copy() if self.key else None,
            attributes=self._copy_list(self.attributes, SDPAttributeField.copy),
        )

    def __str__(self) -> str:
        return serialize_media(self)
