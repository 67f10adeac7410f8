# file: backend/share_codec.py

import base64
import binascii
import json
import logging
import zlib

from pydantic import ValidationError

from backend.models import SharePayload

# Raw DEFLATE stream (no zlib header), level 9
_WBITS = -15
MAX_DECODED_BYTES = 2 * 1024 * 1024


class ShareDecodeError(ValueError):
    """Raised when a share token cannot be turned back into a payload."""


def encode_share_payload(payload: SharePayload) -> str:
    """Serialize, deflate and base64url-encode a share payload (no padding)."""
    text = json.dumps(payload.model_dump(mode="json"), separators=(",", ":"), ensure_ascii=False)
    compressor = zlib.compressobj(9, zlib.DEFLATED, _WBITS)
    compressed = compressor.compress(text.encode("utf-8")) + compressor.flush()
    return base64.urlsafe_b64encode(compressed).decode("ascii").rstrip("=")


def decode_share_payload(token: str) -> SharePayload:
    """Exact inverse of encode_share_payload; raises ShareDecodeError on bad input."""
    if not token:
        raise ShareDecodeError("Empty share token")
    try:
        padded = token.strip() + "=" * (-len(token.strip()) % 4)
        compressed = base64.b64decode(padded, altchars=b"-_", validate=True)
        decompressor = zlib.decompressobj(_WBITS)
        raw = decompressor.decompress(compressed, MAX_DECODED_BYTES)
        if decompressor.unconsumed_tail or not decompressor.eof:
            raise ShareDecodeError("Share token is truncated or too large")
        if decompressor.unused_data:
            raise ShareDecodeError("Share token has trailing data")
        return SharePayload.model_validate_json(raw)
    except ShareDecodeError:
        raise
    except (binascii.Error, zlib.error, UnicodeError, ValidationError, ValueError) as e:
        logging.warning(f"Invalid share token: {e}")
        raise ShareDecodeError("Invalid share token") from e
