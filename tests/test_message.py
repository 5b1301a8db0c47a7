import json

import pytest

from app.api.ws.connection.model import message as msg
from app.core.exceptions import MalformedMessage


@pytest.mark.parametrize("field", ["roomId", "room", "sessionId", "session"])
def test_join_accepts_room_id_aliases(field):
    parsed = msg.parse_client_message(json.dumps({"type": "join", field: "abc"}))

    assert isinstance(parsed, msg.JoinMessage)
    assert parsed.room_id == "abc"


def test_create_session_is_a_create():
    assert isinstance(msg.parse_client_message('{"type": "create-session"}'), msg.CreateMessage)


def test_negotiation_payload_is_kept_opaque():
    parsed = msg.parse_client_message(
        json.dumps({"type": "offer", "sdp": {"type": "offer", "sdp": "v=0"}, "roomId": "ignored"})
    )

    assert isinstance(parsed, msg.NegotiationMessage)
    assert parsed.type == "offer"


@pytest.mark.parametrize("kind", ["answer", "ice-candidate", "candidate", "ice"])
def test_negotiation_kinds(kind):
    assert isinstance(msg.parse_client_message(json.dumps({"type": kind})), msg.NegotiationMessage)


def test_log_message_accepts_msg_alias():
    parsed = msg.parse_client_message('{"type": "log", "msg": "client-alive"}')

    assert isinstance(parsed, msg.LogMessage)
    assert parsed.message == "client-alive"


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "[1, 2, 3]",
        '{"no_type": true}',
        '{"type": "teleport"}',
        '{"type": "join"}',
        '{"type": "join", "roomId": ""}',
    ],
)
def test_malformed_frames(raw):
    with pytest.raises(MalformedMessage):
        msg.parse_client_message(raw)


def test_notifications_drop_empty_fields():
    assert msg.created("abc") == {"type": "created", "roomId": "abc", "count": 1}
    assert msg.joined("abc", 2) == {"type": "joined", "roomId": "abc", "count": 2}
    assert msg.room_full("abc") == {"type": "full", "roomId": "abc"}
    assert msg.error("boom") == {"type": "error", "message": "boom"}
    assert msg.notification("peer-left", roomId=None) == {"type": "peer-left"}
