from __future__ import annotations

import pytest

from sdpmodel.sdp import (
    SDPAttributeField,
    SDPBandwidthField,
    SDPConnectionField,
    SDPEmailField,
    SDPInformationField,
    SDPKeyField,
    SDPMediaField,
    SDPOriginField,
    SDPRepeatField,
    SDPSessionNameField,
    SDPTimeField,
    SDPVersionField,
)


def _crlf(*lines: str) -> str:
    return "".join(f"{line}\r\n" for line in lines)


# RFC 4566 section 5 example
SEMINAR_SDP: str = _crlf(
    "v=0",
    "o=jdoe 2890844526 2890842807 IN IP4 10.47.16.5",
    "s=SDP Seminar",
    "i=A Seminar on the session description protocol",
    "u=http://www.example.com/seminars/sdp.pdf",
    "e=j.doe@example.com (Jane Doe)",
    "c=IN IP4 224.2.17.12/127",
    "t=2873397496 2873404696",
    "a=recvonly",
    "m=audio 49170 RTP/AVP 0",
    "m=video 51372 RTP/AVP 99",
    "a=rtpmap:99 h263-1998/90000",
)

FULL_SDP: str = _crlf(
    "v=0",
    "o=- 12345 67890 IN IP4 192.168.1.100",
    "s=Session",
    "e=alice@example.com",
    "e=bob@example.com",
    "p=+1 617 555-6011",
    "c=IN IP4 192.168.1.100",
    "b=AS:256",
    "t=3034423619 3042462419",
    "r=604800 3600 0 90000",
    "t=0 0",
    "z=2882844526 -1h 2898848070 0",
    "k=prompt",
    "a=sendrecv",
    "m=audio 49170/2 RTP/AVP 0 8 96",
    "i=voice",
    "c=IN IP4 192.168.1.101",
    "b=TIAS:64000",
    "k=clear:secret",
    "a=rtpmap:96 opus/48000/2",
    "a=fmtp:96 minptime=10;useinbandfec=1",
    "a=ptime:20",
    "m=video 51372 RTP/SAVP 97",
    "a=rtpmap:97 H264/90000",
)

# same content as FULL_SDP, with fields shuffled within their scopes
SHUFFLED_FULL_SDP: str = _crlf(
    "v=0",
    "a=sendrecv",
    "s=Session",
    "o=- 12345 67890 IN IP4 192.168.1.100",
    "k=prompt",
    "t=3034423619 3042462419",
    "r=604800 3600 0 90000",
    "b=AS:256",
    "e=alice@example.com",
    "t=0 0",
    "c=IN IP4 192.168.1.100",
    "p=+1 617 555-6011",
    "m=audio 49170/2 RTP/AVP 0 8 96",
    "a=rtpmap:96 opus/48000/2",
    "k=clear:secret",
    "b=TIAS:64000",
    "e=bob@example.com",
    "i=voice",
    "a=fmtp:96 minptime=10;useinbandfec=1",
    "z=2882844526 -1h 2898848070 0",
    "c=IN IP4 192.168.1.101",
    "a=ptime:20",
    "m=video 51372 RTP/SAVP 97",
    "a=rtpmap:97 H264/90000",
)


@pytest.fixture
def seminar_sdp() -> str:
    """The RFC 4566 example session description, in canonical order."""
    return SEMINAR_SDP


@pytest.fixture
def full_sdp() -> str:
    """A session description using every field kind, in canonical order."""
    return FULL_SDP


@pytest.fixture
def shuffled_full_sdp() -> str:
    """The same session description as `full_sdp`, in non-canonical order."""
    return SHUFFLED_FULL_SDP


@pytest.fixture
def header_fields():
    """The mandatory session-level fields."""
    return [
        SDPVersionField(value="0"),
        SDPOriginField(
            username="-",
            sess_id="1",
            sess_version="1",
            nettype="IN",
            addrtype="IP4",
            unicast_address="10.0.0.1",
        ),
        SDPSessionNameField(value="-"),
    ]


def make_media(media: str = "audio", port: int = 49170, *formats: str) -> SDPMediaField:
    return SDPMediaField(
        media=media,
        port=port,
        number_of_ports=None,
        protocol="RTP/AVP",
        formats=list(formats or ("0",)),
    )


def make_info(text: str) -> SDPInformationField:
    return SDPInformationField(value=text)


def make_attr(name: str, value: str | None = None) -> SDPAttributeField:
    return SDPAttributeField(name=name, value=value)


def make_bw(bwtype: str, bandwidth: int) -> SDPBandwidthField:
    return SDPBandwidthField(bwtype=bwtype, bandwidth=bandwidth)


def make_conn(address: str) -> SDPConnectionField:
    return SDPConnectionField(nettype="IN", addrtype="IP4", address=address)


def make_key(method: str = "prompt", key: str | None = None) -> SDPKeyField:
    return SDPKeyField(method=method, key=key)


def make_email(address: str) -> SDPEmailField:
    return SDPEmailField(value=address)


def make_time(start: int = 0, stop: int = 0) -> SDPTimeField:
    return SDPTimeField(start_time=start, stop_time=stop)


def make_repeat(interval: int = 86400, duration: int = 3600, *offsets: int) -> SDPRepeatField:
    return SDPRepeatField(interval=interval, duration=duration, offsets=list(offsets or (0,)))
