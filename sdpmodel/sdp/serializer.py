"""
Canonical SDP text serializer.

Fields are emitted in the fixed order of :rfc:`8866#section-5`, regardless of the order
in which they were attached. Absent fields and lists contribute nothing, and every field
line carries its own line terminator, so no separators are added here.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable


if TYPE_CHECKING:
    from .fields import SDPField
    from .media import SDPMedia
    from .session import SDPSession
    from .time import SDPTime


__all__ = [
    "serialize_session",
    "serialize_media",
    "serialize_time",
]


_logger = logging.getLogger(__name__)


def _encode_field(field: SDPField | None) -> str:
    return "" if field is None else field.encode()


def _encode_fields(fields: Iterable[SDPField] | None) -> str:
    return "".join(field.encode() for field in fields or ())


def serialize_time(time: SDPTime) -> str:
    """Serialize a time description: its time field followed by its repeat fields."""
    return _encode_field(time.time) + _encode_fields(time.repeats)


def serialize_media(media: SDPMedia) -> str:
    """Serialize a media description, in the media-level field order."""
    return "".join((
        _encode_field(media.media),
        _encode_field(media.information),
        _encode_field(media.connection),
        _encode_fields(media.bandwidths),
        _encode_field(media.key),
        _encode_fields(media.attributes),
    ))


def serialize_session(session: SDPSession) -> str:
    """
    Serialize a whole session description to canonical SDP text.

    :param session: the session to serialize.
    :return: the SDP text, with each line terminated by CRLF.
    :raises SDPFieldEncodingError: if any field payload is invalid.
    """
    if not session.is_complete:
        _logger.debug("Serializing a session without version, origin or session name")

    return "".join((
        _encode_field(session.version),
        _encode_field(session.origin),
        _encode_field(session.name),
        _encode_field(session.information),
        _encode_field(session.uri),
        _encode_fields(session.emails),
        _encode_fields(session.phones),
        _encode_field(session.connection),
        _encode_fields(session.bandwidths),
        "".join(serialize_time(time) for time in session.time_descriptions or ()),
        _encode_fields(session.zone_adjustments),
        _encode_field(session.key),
        _encode_fields(session.attributes),
        "".join(serialize_media(media) for media in session.media_descriptions or ()),
    ))
