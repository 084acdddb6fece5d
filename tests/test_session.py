from __future__ import annotations

import pytest

from sdpmodel.exceptions import SDPInvalidArgument, SDPParseError
from sdpmodel.sdp import (
    MediaFlowType,
    PTimeAttribute,
    SDPMedia,
    SDPSession,
    SDPTime,
    SDPVersionField,
    UnknownAttribute,
    assemble,
)

from .conftest import (
    make_attr,
    make_bw,
    make_conn,
    make_email,
    make_info,
    make_key,
    make_media,
    make_repeat,
    make_time,
)


@pytest.fixture(params=["session", "media"])
def section(request):
    """Both kinds of sections owning keyed attribute and bandwidth lists."""
    if request.param == "session":
        return SDPSession()
    return SDPMedia(media=make_media())


class TestKeyedAttributes:
    @pytest.fixture
    def keyed_section(self, section):
        section.set_attributes([make_attr("a", "1"), make_attr("a", "2"), make_attr("b", "3")])
        return section

    def test_get_returns_first_match(self, keyed_section):
        """Test that lookups return the first matching attribute's value."""
        assert keyed_section.get_attribute("a") == "1"
        assert keyed_section.get_attribute("b") == "3"
        assert keyed_section.get_attribute("c") is None
        assert keyed_section.get_attribute(None) is None

    def test_set_updates_all_matches(self, keyed_section):
        """Test that updates apply to every matching attribute."""
        keyed_section.set_attribute("a", "9")
        assert keyed_section.get_attribute("a") == "9"
        assert [a.value for a in keyed_section.attributes] == ["9", "9", "3"]

    def test_set_does_not_insert(self, keyed_section):
        """Test that updating a missing attribute is a no-op."""
        keyed_section.set_attribute("c", "4")
        assert len(keyed_section.attributes) == 3
        assert keyed_section.get_attribute("c") is None

    def test_remove_deletes_all_matches(self, keyed_section):
        """Test that removal deletes every matching attribute."""
        attributes = keyed_section.attributes
        keyed_section.remove_attribute("a")
        assert keyed_section.get_attribute("a") is None
        assert keyed_section.attributes == [make_attr("b", "3")]
        assert keyed_section.attributes is attributes
        keyed_section.remove_attribute("zzz")
        keyed_section.remove_attribute(None)
        assert len(keyed_section.attributes) == 1

    def test_set_requires_name_and_value(self, keyed_section):
        """Test that updates require both a name and a value."""
        with pytest.raises(SDPInvalidArgument):
            keyed_section.set_attribute("a", None)
        with pytest.raises(SDPInvalidArgument):
            keyed_section.set_attribute(None, "1")

    def test_has_attribute(self, keyed_section):
        """Test attribute presence checks, including property attributes."""
        keyed_section.get_attributes().append(make_attr("recvonly"))
        assert keyed_section.has_attribute("recvonly")
        assert keyed_section.get_attribute("recvonly") is None
        assert not keyed_section.has_attribute("sendonly")

    def test_empty_section(self, section):
        """Test keyed helpers on a section without attributes."""
        section.set_attributes([])
        assert section.get_attribute("a") is None
        section.set_attribute("a", "1")
        section.remove_attribute("a")
        assert section.attributes == []


class TestKeyedBandwidths:
    def test_bandwidth_helpers(self, section):
        """Test the first-match read / all-match write asymmetry for bandwidths."""
        section.set_bandwidths([make_bw("AS", 64), make_bw("AS", 128), make_bw("CT", 256)])
        assert section.get_bandwidth("AS") == 64
        section.set_bandwidth("AS", 512)
        assert [b.bandwidth for b in section.bandwidths] == [512, 512, 256]
        section.set_bandwidth("TIAS", 1)
        assert len(section.bandwidths) == 3
        section.remove_bandwidth("AS")
        assert section.get_bandwidth("AS") is None
        assert section.bandwidths == [make_bw("CT", 256)]
        assert section.get_bandwidth(None) is None
        with pytest.raises(SDPInvalidArgument):
            section.set_bandwidth("CT", None)


class TestListAccessors:
    def test_lazy_creation_on_media(self):
        """Test that absent lists are created and stored only when asked to."""
        media = SDPMedia(media=make_media())
        assert media.get_bandwidths() is None
        bandwidths = media.get_bandwidths(create=True)
        assert bandwidths == []
        assert media.get_bandwidths() is bandwidths
        assert media.get_bandwidths(create=True) is bandwidths

    def test_lazy_creation_on_session(self):
        """Test that sessions start with empty lists, kept across retrievals."""
        session = SDPSession()
        bandwidths = session.get_bandwidths(create=True)
        assert bandwidths == []
        assert session.get_bandwidths() is bandwidths

    def test_lazy_creation_on_time(self):
        """Test lazy creation of the repeat fields list."""
        time = SDPTime(time=make_time())
        assert time.get_repeats() is None
        repeats = time.get_repeats(create=True)
        assert repeats == []
        assert time.get_repeats() is repeats

    def test_set_empty_list_clears(self, section):
        """Test that setting an empty list clears the previous contents."""
        section.set_attributes([make_attr("a", "1")])
        section.set_attributes([])
        assert section.get_attributes() == []
        assert section.get_attribute("a") is None

    def test_set_none_rejected(self, section):
        """Test that setting an absent list is rejected, leaving the contents untouched."""
        attributes = [make_attr("a", "1")]
        section.set_attributes(attributes)
        with pytest.raises(SDPInvalidArgument):
            section.set_attributes(None)
        assert section.get_attributes() is attributes

    def test_set_non_list_rejected(self, section):
        """Test that tuples and generators are rejected, leaving the contents untouched."""
        attributes = [make_attr("a", "1")]
        section.set_attributes(attributes)
        with pytest.raises(SDPInvalidArgument):
            section.set_attributes(())
        with pytest.raises(SDPInvalidArgument):
            section.set_attributes(attr for attr in [make_attr("b", "2")])
        with pytest.raises(SDPInvalidArgument):
            section.set_bandwidths((make_bw("AS", 64),))
        assert section.get_attributes() is attributes
        assert section.get_attribute("a") == "1"

    def test_attach_after_rejected_tuple(self):
        """Test that a session stays assemblable after a rejected non-list replacement."""
        session = SDPSession()
        with pytest.raises(SDPInvalidArgument):
            session.set_attributes(())
        assemble([make_attr("sendrecv")], session=session)
        assert session.has_attribute("sendrecv")

    def test_set_wrong_item_type_rejected(self):
        """Test that lists of the wrong field kind are rejected."""
        session = SDPSession()
        with pytest.raises(SDPInvalidArgument):
            session.set_emails([make_attr("a")])
        with pytest.raises(SDPInvalidArgument):
            session.set_media_descriptions([make_media()])
        assert session.emails == []

    def test_session_list_setters(self):
        """Test replacing the session-only lists."""
        session = SDPSession()
        emails = [make_email("alice@example.com")]
        session.set_emails(emails)
        assert session.get_emails() is emails
        session.set_phones([])
        assert session.get_phones() == []
        times = [SDPTime(time=make_time())]
        session.set_time_descriptions(times)
        assert session.get_time_descriptions() is times
        session.set_zone_adjustments([])
        assert session.get_zone_adjustments() == []
        media = [SDPMedia(media=make_media())]
        session.set_media_descriptions(media)
        assert session.get_media_descriptions() is media
        with pytest.raises(SDPInvalidArgument):
            session.set_time_descriptions(None)


class TestSingletonSetters:
    def test_set_singletons(self):
        """Test replacing session singletons."""
        session = SDPSession()
        version = SDPVersionField(value="0")
        session.set_version(version)
        assert session.version is version
        info = make_info("about")
        session.set_information(info)
        assert session.information is info

    def test_set_none_rejected(self):
        """Test that singleton setters reject None and keep the previous value."""
        session = SDPSession()
        connection = make_conn("10.0.0.1")
        session.set_connection(connection)
        with pytest.raises(SDPInvalidArgument):
            session.set_connection(None)
        assert session.connection is connection

    def test_set_wrong_kind_rejected(self):
        """Test that singleton setters reject fields of another kind."""
        media = SDPMedia(media=make_media())
        with pytest.raises(SDPInvalidArgument):
            media.set_key(make_conn("10.0.0.1"))
        with pytest.raises(SDPInvalidArgument):
            media.set_media(None)
        assert media.key is None

    def test_sections_require_start_field(self):
        """Test that media and time descriptions can't be built without their start field."""
        with pytest.raises(SDPInvalidArgument):
            SDPMedia(media=None)
        with pytest.raises(SDPInvalidArgument):
            SDPTime(time=None)
        time = SDPTime(time=make_time())
        with pytest.raises(SDPInvalidArgument):
            time.add_repeat(None)


class TestInheritance:
    def test_effective_values(self):
        """Test that media descriptions fall back to session-level values."""
        session = SDPSession(connection=make_conn("10.0.0.1"), key=make_key())
        session.set_information(make_info("session"))
        own = SDPMedia(media=make_media(), connection=make_conn("10.0.0.2"))
        inheriting = SDPMedia(media=make_media("video", 51372))
        session.set_media_descriptions([own, inheriting])
        assert session.effective_connection(own).address == "10.0.0.2"
        assert session.effective_connection(inheriting).address == "10.0.0.1"
        assert session.effective_key(inheriting) is session.key
        assert session.effective_information(own) is session.information

    def test_connection_address(self, caplog):
        """Test the advertised media connection address."""
        session = SDPSession(connection=make_conn("10.0.0.1"))
        assert session.connection_address is None
        session.set_media_descriptions([SDPMedia(media=make_media("audio", 5004))])
        assert session.connection_address == ("10.0.0.1", 5004)
        session.get_media_descriptions().append(
            SDPMedia(media=make_media("video", 5006), connection=make_conn("10.0.0.2"))
        )
        assert session.connection_address == ("10.0.0.1", 5004)
        assert "Multiple connection addresses" in caplog.text


class TestMediaFlow:
    def test_media_flow_types(self, full_sdp):
        """Test media flow types and rtpmaps extracted from typed attributes."""
        session = SDPSession.parse(full_sdp)
        assert session.media_flow_type is MediaFlowType.SENDRECV
        audio, video = session.media_descriptions
        assert audio.media_flow_type is None
        assert [r.encoding_name for r in audio.rtpmaps] == ["opus"]
        assert [r.payload_type for r in video.rtpmaps] == [97]

    def test_malformed_typed_values_dont_hide_others(self):
        """Test that an attribute with a malformed typed value doesn't break other lookups."""
        session = SDPSession.parse(
            "v=0\r\n"
            "o=- 1 1 IN IP4 10.0.0.1\r\n"
            "s=-\r\n"
            "m=audio 5004 RTP/AVP 96\r\n"
            "a=ptime:20.5\r\n"
            "a=rtpmap:96\r\n"
            "a=rtpmap:0 PCMU/8000\r\n"
            "a=sendonly\r\n"
        )
        media = session.media_descriptions[0]
        assert media.media_flow_type is MediaFlowType.SENDONLY
        assert [r.payload_type for r in media.rtpmaps] == [0]
        typed = media.typed_attributes
        assert isinstance(typed[0], PTimeAttribute)
        assert typed[0].value == 20.5
        assert isinstance(typed[1], UnknownAttribute)
        assert str(typed[1]) == "rtpmap:96"

    def test_conflicting_flows(self):
        """Test that more than one media flow attribute is an error."""
        attributes = [make_attr("sendonly"), make_attr("inactive")]
        media = SDPMedia(media=make_media(), attributes=attributes)
        with pytest.raises(SDPParseError):
            media.media_flow_type


class TestCopy:
    def test_copy_is_equal(self, full_sdp):
        """Test that a copy is equal to the original."""
        session = SDPSession.parse(full_sdp)
        session_copy = session.copy()
        assert session_copy == session
        assert str(session_copy) == str(session)

    def test_copy_is_deep(self, full_sdp):
        """Test that nothing is shared between a session and its copy."""
        session = SDPSession.parse(full_sdp)
        session_copy = session.copy()
        assert session_copy.origin is not session.origin
        assert session_copy.emails is not session.emails
        assert session_copy.emails[0] is not session.emails[0]
        assert session_copy.time_descriptions[0] is not session.time_descriptions[0]
        time, time_copy = session.time_descriptions[0], session_copy.time_descriptions[0]
        assert time_copy.repeats[0] is not time.repeats[0]
        assert session_copy.media_descriptions[0] is not session.media_descriptions[0]
        assert session_copy.media_descriptions[0].media is not session.media_descriptions[0].media

        session_copy.set_attribute("sendrecv", "x")
        session_copy.media_descriptions[0].set_attribute("ptime", "40")
        session_copy.media_descriptions[0].media.formats.append("101")
        session_copy.get_emails().clear()
        assert session.get_attribute("sendrecv") is None
        assert session.media_descriptions[0].get_attribute("ptime") == "20"
        assert session.media_descriptions[0].media.formats == ["0", "8", "96"]
        assert len(session.emails) == 2

    def test_copy_keeps_absent_lists(self):
        """Test that absent lists stay absent in copies."""
        media = SDPMedia(media=make_media())
        media_copy = media.copy()
        assert media_copy.attributes is None
        assert media_copy.bandwidths is None
        time = SDPTime(time=make_time(), repeats=[make_repeat()])
        assert time.copy() == time
