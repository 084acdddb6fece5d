"""
Assembly of classified SDP fields into a session model.

Fields are attached one at a time in arrival order. The meaning of some of them depends
on what was attached before: information, connection, key, bandwidth and attribute
fields belong to the most recently opened media description (if any), and repeat fields
belong to the most recently opened time description.
"""

from __future__ import annotations

import logging
from typing import Iterable

from typing_extensions import assert_never

from sdpmodel.exceptions import (
    SDPException,
    SDPFieldEncodingError,
    SDPStructuralOrderError,
)

from .fields import (
    AnySDPField,
    SDPAttributeField,
    SDPBandwidthField,
    SDPConnectionField,
    SDPEmailField,
    SDPInformationField,
    SDPKeyField,
    SDPMediaField,
    SDPOriginField,
    SDPPhoneField,
    SDPRepeatField,
    SDPSessionNameField,
    SDPTimeField,
    SDPURIField,
    SDPVersionField,
    SDPZoneField,
)
from .media import SDPMedia
from .session import SDPSession
from .time import SDPTime


__all__ = [
    "SDPSessionAssembler",
    "assemble",
]


_logger = logging.getLogger(__name__)


class SDPSessionAssembler:
    """
    Attaches classified SDP fields to a session, keeping track of the open
    media and time descriptions.

    An assembler is meant to be driven by a single writer: it is not safe to call
    :meth:`attach` concurrently on the same instance. A failed attach leaves the
    session as it was after the last successful one.
    """

    def __init__(self, session: SDPSession | None = None):
        self._session: SDPSession = session if session is not None else SDPSession()
        self._current_media: SDPMedia | None = None
        self._current_time: SDPTime | None = None

    @property
    def session(self) -> SDPSession:
        """The session being assembled."""
        return self._session

    @property
    def current_media(self) -> SDPMedia | None:
        """The currently open media description, if any."""
        return self._current_media

    @property
    def current_time(self) -> SDPTime | None:
        """The currently open time description, if any."""
        return self._current_time

    def reset(self) -> None:
        """Close the open media and time descriptions, without touching the session."""
        self._current_media = None
        self._current_time = None

    def attach(self, field: AnySDPField) -> None:
        """
        Attach a field to the session, or to the open media / time description.

        :param field: the classified field to attach.
        :raises SDPStructuralOrderError: if a repeat field arrives with no open time description.
        :raises SDPFieldEncodingError: if the field payload is invalid.
        """
        field.validate()
        try:
            self._dispatch(field)
        except SDPException:
            raise
        except (ValueError, TypeError) as e:
            raise SDPFieldEncodingError(
                f"Cannot attach {type(field).__name__}: {e}", field=field
            ) from e

    def _dispatch(self, field: AnySDPField) -> None:  # noqa: C901
        session = self._session
        # context-sensitive fields go to the open media description, if any
        target: SDPSession | SDPMedia = (
            self._current_media if self._current_media is not None else session
        )

        if isinstance(field, SDPVersionField):
            session.set_version(field)
        elif isinstance(field, SDPOriginField):
            session.set_origin(field)
        elif isinstance(field, SDPSessionNameField):
            session.set_name(field)
        elif isinstance(field, SDPURIField):
            session.set_uri(field)
        elif isinstance(field, SDPInformationField):
            target.set_information(field)
        elif isinstance(field, SDPConnectionField):
            target.set_connection(field)
        elif isinstance(field, SDPKeyField):
            target.set_key(field)
        elif isinstance(field, SDPEmailField):
            session.get_emails(create=True).append(field)  # type: ignore[union-attr]
        elif isinstance(field, SDPPhoneField):
            session.get_phones(create=True).append(field)  # type: ignore[union-attr]
        elif isinstance(field, SDPZoneField):
            session.get_zone_adjustments(create=True).append(field)  # type: ignore[union-attr]
        elif isinstance(field, SDPTimeField):
            time = SDPTime(time=field)
            session.get_time_descriptions(create=True).append(time)  # type: ignore[union-attr]
            self._current_time = time
            _logger.debug(f"Opened time description: {field}")
        elif isinstance(field, SDPRepeatField):
            if self._current_time is None:
                raise SDPStructuralOrderError(
                    f"Repeat field {field} found before any time field"
                )
            self._current_time.add_repeat(field)
        elif isinstance(field, SDPBandwidthField):
            target.get_bandwidths(create=True).append(field)  # type: ignore[union-attr]
        elif isinstance(field, SDPAttributeField):
            target.get_attributes(create=True).append(field)  # type: ignore[union-attr]
        elif isinstance(field, SDPMediaField):
            media = SDPMedia(media=field)
            session.get_media_descriptions(create=True).append(media)  # type: ignore[union-attr]
            self._current_media = media
            _logger.debug(f"Opened media description: {field}")
        else:
            assert_never(field)

    def attach_all(self, fields: Iterable[AnySDPField], *, skip_errors: bool = False) -> None:
        """
        Attach fields in order.

        :param fields: the fields to attach.
        :param skip_errors: if True, fields that fail to attach are logged and skipped,
            otherwise the first failure is raised.
        """
        for field in fields:
            try:
                self.attach(field)
            except (SDPStructuralOrderError, SDPFieldEncodingError) as e:
                if not skip_errors:
                    raise
                _logger.warning(f"Skipping SDP field that failed to attach: {e}")


def assemble(
    fields: Iterable[AnySDPField],
    *,
    session: SDPSession | None = None,
    skip_errors: bool = False,
) -> SDPSession:
    """
    Assemble a session from classified fields.

    :param fields: the fields, in arrival order.
    :param session: an existing session to attach the fields to, or None for a new one.
    :param skip_errors: whether to log and skip fields that fail to attach.
    :return: the assembled session.
    """
    assembler = SDPSessionAssembler(session)
    assembler.attach_all(fields, skip_errors=skip_errors)
    return assembler.session
