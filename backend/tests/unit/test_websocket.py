"""Unit tests for the room WebSocket endpoint."""


def _send(ws, event, data):
    ws.send_json({"event": event, "data": data})


def _create(ws, room_id):
    """Create a room and wait until the server has processed it."""
    _send(ws, "createRoom", room_id)
    # joinRoom is idempotent and answers, so it doubles as a barrier
    _send(ws, "joinRoom", room_id)
    assert ws.receive_json() == {"event": "codeUpdate", "data": ""}


class TestRoomLifecycle:
    """Tests for create/join over the socket."""

    def test_join_unknown_room_returns_error(self, client):
        """Unknown rooms are reported to the requester only."""
        with client.websocket_connect("/ws") as ws:
            _send(ws, "joinRoom", "nope")
            assert ws.receive_json() == {"event": "error", "data": "Room does not exist"}

    def test_second_member_receives_buffer_on_join(self, client):
        """A joiner is synced with the current buffer."""
        with client.websocket_connect("/ws") as alice, client.websocket_connect("/ws") as bob:
            _create(alice, "r1")
            _send(alice, "codeChange", {"roomId": "r1", "code": "x = 1"})
            _send(alice, "joinRoom", "r1")
            assert alice.receive_json() == {"event": "codeUpdate", "data": "x = 1"}

            _send(bob, "joinRoom", "r1")
            assert bob.receive_json() == {"event": "codeUpdate", "data": "x = 1"}

    def test_edit_is_relayed_to_other_member(self, client):
        """codeChange from one member reaches the other."""
        with client.websocket_connect("/ws") as alice, client.websocket_connect("/ws") as bob:
            _create(alice, "r1")
            _send(bob, "joinRoom", "r1")
            assert bob.receive_json()["event"] == "codeUpdate"

            _send(alice, "codeChange", {"roomId": "r1", "code": "hello"})
            assert bob.receive_json() == {"event": "codeUpdate", "data": "hello"}


class TestCompileOverSocket:
    """Tests for compile round trips."""

    def test_compile_result_reaches_everyone(self, client):
        """Both members receive the output and it becomes the buffer."""
        with client.websocket_connect("/ws") as alice, client.websocket_connect("/ws") as bob:
            _create(alice, "r1")
            _send(bob, "joinRoom", "r1")
            bob.receive_json()

            _send(alice, "compile", {"roomId": "r1", "code": 'log("a"); log("b")'})
            assert alice.receive_json() == {"event": "compileResult", "data": "ab"}
            assert bob.receive_json() == {"event": "compileResult", "data": "ab"}

            _send(bob, "joinRoom", "r1")
            assert bob.receive_json() == {"event": "codeUpdate", "data": "ab"}

    def test_compile_error_payload(self, client):
        """Failures arrive as an error object."""
        with client.websocket_connect("/ws") as ws:
            _create(ws, "r1")
            _send(ws, "compile", {"roomId": "r1", "code": "log(missing)"})
            message = ws.receive_json()

            assert message["event"] == "compileResult"
            assert message["data"]["error"].startswith("Some error occurred: NameError")
            assert message["data"]["error_type"] == "NameError"

            _send(ws, "joinRoom", "r1")
            assert ws.receive_json() == {"event": "codeUpdate", "data": ""}


class TestBadFrames:
    """The connection survives malformed input."""

    def test_non_json_frame(self, client):
        """Plain text frames are answered with an error."""
        with client.websocket_connect("/ws") as ws:
            ws.send_text("not json")
            message = ws.receive_json()
            assert message["event"] == "error"
            assert message["data"].startswith("Invalid payload")

            _send(ws, "joinRoom", "nope")
            assert ws.receive_json()["data"] == "Room does not exist"

    def test_unknown_event(self, client):
        """Unknown event names are validation errors."""
        with client.websocket_connect("/ws") as ws:
            _send(ws, "deleteRoom", "r1")
            message = ws.receive_json()
            assert message["event"] == "error"
            assert "event" in message["data"]

    def test_binary_frame_keeps_connection_open(self, client):
        """A binary frame that is not JSON is answered and the socket stays usable."""
        with client.websocket_connect("/ws") as ws:
            ws.send_bytes(b"\x00\x01")
            message = ws.receive_json()
            assert message["event"] == "error"
            assert message["data"].startswith("Invalid payload")

            _send(ws, "joinRoom", "nope")
            assert ws.receive_json() == {"event": "error", "data": "Room does not exist"}

    def test_binary_json_frame_is_dispatched(self, client):
        """JSON carried in a binary frame is handled like a text frame."""
        with client.websocket_connect("/ws") as ws:
            ws.send_bytes(b'{"event": "joinRoom", "data": "nope"}')
            assert ws.receive_json() == {"event": "error", "data": "Room does not exist"}
