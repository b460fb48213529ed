"""
Tests for the Frame Codec

These tests verify request/response framing:
- encode_request(): fixed 8-byte big-endian header plus payload
- decode_request_header(): header parsing
- encode_response() / decode_response_length(): length-prefixed replies
- send_request(): one full request/response cycle

Run with: python -m pytest tests/test_codec.py -v
"""

import socket
import threading
import pytest

from melian.errors import ConfigurationError, ProtocolError, TransportError
from melian.protocol.codec import (
    REQUEST_HEADER,
    RESPONSE_PREFIX,
    decode_request_header,
    decode_response_length,
    encode_request,
    encode_response,
    send_request,
)
from melian.protocol.commands import HEADER_VERSION, Action
from melian.network.transport import read_exact


class TestActions:
    """Test opcode and version constants."""

    def test_fetch_is_ascii_f(self):
        assert Action.FETCH == ord("F") == 0x46

    def test_describe_is_ascii_d(self):
        assert Action.DESCRIBE == ord("D") == 0x44

    def test_header_version(self):
        assert HEADER_VERSION == 0x11

    def test_header_sizes(self):
        assert REQUEST_HEADER.size == 8
        assert RESPONSE_PREFIX.size == 4


class TestEncodeRequest:
    """Test encode_request()."""

    def test_exact_layout(self):
        """Test byte-for-byte layout of a FETCH frame."""
        frame = encode_request(Action.FETCH, 1, 2, b"Pixel")

        assert frame == b"\x11F\x01\x02\x00\x00\x00\x05Pixel"

    def test_length_is_big_endian(self):
        """Test payload length is written most significant byte first."""
        frame = encode_request(Action.FETCH, 0, 0, b"x" * 258)

        assert frame[4:8] == b"\x00\x00\x01\x02"

    def test_describe_frame(self):
        """Test DESCRIBE frame has no payload."""
        assert encode_request(Action.DESCRIBE, 0, 0) == b"\x11D\x00\x00\x00\x00\x00\x00"

    @pytest.mark.parametrize("table_id,column_id", [(0, 0), (1, 254), (127, 128), (255, 255)])
    @pytest.mark.parametrize("key", [b"", b"k", bytes(range(256))])
    def test_header_round_trip(self, table_id, column_id, key):
        """Test header fields survive encode then decode."""
        frame = encode_request(Action.FETCH, table_id, column_id, key)
        header = decode_request_header(frame[:8])

        assert header.version == HEADER_VERSION
        assert header.action == Action.FETCH
        assert header.table_id == table_id
        assert header.column_id == column_id
        assert header.payload_length == len(key)
        assert frame[8:] == key

    @pytest.mark.parametrize("table_id,column_id", [(256, 0), (0, 256), (-1, 0), (0, -1)])
    def test_identifier_out_of_range(self, table_id, column_id):
        """Test identifiers must fit in one byte."""
        with pytest.raises(ConfigurationError):
            encode_request(Action.FETCH, table_id, column_id, b"k")

    def test_identifier_not_integer(self):
        """Test non-integer identifiers are rejected."""
        with pytest.raises(ConfigurationError):
            encode_request(Action.FETCH, "1", 0, b"k")


class TestDecodeRequestHeader:
    """Test decode_request_header()."""

    def test_decode(self):
        header = decode_request_header(b"\x11D\x00\x00\x00\x00\x00\x00")

        assert header.is_describe
        assert not header.is_fetch
        assert header.payload_length == 0

    def test_short_header(self):
        with pytest.raises(ProtocolError):
            decode_request_header(b"\x11F\x00")


class TestResponseFraming:
    """Test response length prefix handling."""

    def test_encode_response(self):
        assert encode_response(b"{}") == b"\x00\x00\x00\x02{}"

    def test_encode_empty_response(self):
        assert encode_response(b"") == b"\x00\x00\x00\x00"

    def test_decode_length(self):
        assert decode_response_length(b"\x00\x00\x01\x00") == 256

    def test_decode_length_wrong_width(self):
        with pytest.raises(ProtocolError):
            decode_response_length(b"\x00\x01")


class TestSendRequest:
    """Test send_request() over a socket pair."""

    def test_cycle(self, socket_pair):
        """Test request is written and payload returned."""
        client, server = socket_pair
        server.sendall(encode_response(b'{"id": 1}'))

        payload = send_request(client, Action.FETCH, 3, 4, b"key")

        assert payload == b'{"id": 1}'
        request = read_exact(server, 11)
        assert request == encode_request(Action.FETCH, 3, 4, b"key")

    def test_zero_length_response(self, socket_pair):
        """Test a zero length reply is an empty payload, not an error."""
        client, server = socket_pair
        server.sendall(b"\x00\x00\x00\x00")

        assert send_request(client, Action.FETCH, 0, 0, b"missing") == b""

    def test_truncated_payload(self, socket_pair):
        """Test a reply shorter than its declared length raises."""
        client, server = socket_pair
        server.sendall(RESPONSE_PREFIX.pack(10) + b"abc")
        server.shutdown(socket.SHUT_WR)

        with pytest.raises(TransportError, match="closed unexpectedly"):
            send_request(client, Action.FETCH, 0, 0, b"k")

    def test_truncated_prefix(self, socket_pair):
        """Test a connection closing inside the length prefix raises."""
        client, server = socket_pair
        server.sendall(b"\x00\x00")
        server.shutdown(socket.SHUT_WR)

        with pytest.raises(TransportError):
            send_request(client, Action.FETCH, 0, 0, b"k")

    def test_large_payload(self, socket_pair):
        """Test a payload bigger than one recv() is fully assembled."""
        client, server = socket_pair
        body = b"x" * 200_000

        sender = threading.Thread(
            target=server.sendall, args=(encode_response(body),)
        )
        sender.start()
        try:
            payload = send_request(client, Action.FETCH, 0, 0, b"k")
        finally:
            sender.join()

        assert payload == body
