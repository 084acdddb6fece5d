"""Various constants used by the sdpmodel library."""

from __future__ import annotations


SUPPORTED_SDP_VERSIONS: list[str] = ["0"]

LINE_TERMINATOR: str = "\r\n"

SDP_MIMETYPE: str = "application/sdp"
SDP_ENCODING: str = "utf-8"

# typed-time units allowed in repeat fields, see :rfc:`8866#section-5.10`
TIME_UNITS: dict[str, int] = {"d": 86400, "h": 3600, "m": 60, "s": 1}
