"""Exception classes for the sdpmodel library."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from .sdp.fields import SDPField


class SDPModelException(Exception):
    """Base class for all custom library exceptions."""


class SDPException(SDPModelException):
    """Base class for all exceptions raised by the SDP module."""


class SDPParseError(SDPException, ValueError):
    """Exception related to SDP data parsing."""


class SDPUnknownFieldError(SDPParseError):
    """Exception raised when an unknown SDP field is encountered."""


class SDPUnsupportedVersion(SDPException, NotImplementedError):
    """The SDP version is not supported by this library."""


class SDPStructuralOrderError(SDPException):
    """Raised when a field arrives before the field that must open its context."""


class SDPFieldEncodingError(SDPException, ValueError):
    """
    Raised when a field payload cannot be validated or encoded.

    The offending field (if any) is available as ``field``, and its best-effort
    text representation as ``field_text``, for diagnostics.
    """

    def __init__(self, *args: Any, **kwargs: Any):
        """Initialize SDPFieldEncodingError with the optional `field` object."""
        self.field: SDPField | None = kwargs.pop("field", None)
        self.field_text: str | None = kwargs.pop("field_text", None)
        if self.field_text is None and self.field is not None:
            self.field_text = describe_field(self.field)
        super().__init__(*args, **kwargs)


class SDPInvalidArgument(SDPException, ValueError):
    """Raised when a setter receives an absent or mistyped value."""


def describe_field(field: Any) -> str:
    """Return the text form of a field, falling back to its repr if it can't be encoded."""
    try:
        return str(field)
    except Exception:  # noqa: BLE001
        return repr(field)
