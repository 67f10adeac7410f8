"""Tests for the share token codec."""

import base64
import json
import zlib

import pytest
from pydantic import ValidationError

from backend.models import SharePayload
from backend.share_codec import ShareDecodeError, decode_share_payload, encode_share_payload


@pytest.fixture
def payload(history) -> SharePayload:
    return SharePayload(label="Office · week 3", readings=history)


class TestPayload:

    def test_label_limit_counts_utf16_units(self, history):
        assert SharePayload(label="\U0001F600" * 50, readings=history).label
        with pytest.raises(ValidationError):
            SharePayload(label="\U0001F600" * 51, readings=history)
        with pytest.raises(ValidationError):
            SharePayload(label="x" * 101, readings=history)


class TestEncode:

    def test_token_is_url_safe(self, payload):
        token = encode_share_payload(payload)
        assert token
        assert not set(token) & {"+", "/", "="}

    def test_deterministic(self, payload):
        assert encode_share_payload(payload) == encode_share_payload(payload)

    def test_token_is_raw_deflate_of_json(self, payload):
        token = encode_share_payload(payload)
        raw = base64.urlsafe_b64decode(token + "=" * (-len(token) % 4))
        decoded = json.loads(zlib.decompress(raw, -15))
        assert decoded["label"] == "Office · week 3"
        assert len(decoded["readings"]) == 3


class TestDecode:

    def test_round_trip(self, payload):
        assert decode_share_payload(encode_share_payload(payload)) == payload

    def test_round_trip_full_history(self, make_reading):
        readings = [make_reading(f"r{i}", timestamp=i, room="Lab", pm25=str(i), vocQuality="Normal")
                    for i in range(50)]
        payload = SharePayload(label="x" * 100, readings=readings)
        assert decode_share_payload(encode_share_payload(payload)) == payload

    @pytest.mark.parametrize("token", ["not-a-valid-token", "", "abc$", "AAAA"])
    def test_invalid_tokens_fail(self, token):
        with pytest.raises(ShareDecodeError):
            decode_share_payload(token)

    def test_truncated_token_fails(self, payload):
        token = encode_share_payload(payload)
        with pytest.raises(ShareDecodeError):
            decode_share_payload(token[: len(token) // 2])

    def test_trailing_characters_fail(self, payload):
        with pytest.raises(ShareDecodeError):
            decode_share_payload(encode_share_payload(payload) + "AAAAAAAA")

    def test_bytes_after_stream_fail(self, payload):
        compressor = zlib.compressobj(9, zlib.DEFLATED, -15)
        raw = compressor.compress(payload.model_dump_json().encode()) + compressor.flush()
        token = base64.urlsafe_b64encode(raw + b"\x00\x01\x02").decode().rstrip("=")
        with pytest.raises(ShareDecodeError):
            decode_share_payload(token)

    def test_valid_json_with_wrong_shape_fails(self):
        compressor = zlib.compressobj(9, zlib.DEFLATED, -15)
        raw = compressor.compress(b'{"label": "x", "readings": []}') + compressor.flush()
        token = base64.urlsafe_b64encode(raw).decode().rstrip("=")
        with pytest.raises(ShareDecodeError):
            decode_share_payload(token)

    def test_decode_error_is_value_error(self):
        with pytest.raises(ValueError):
            decode_share_payload("not-a-valid-token")
