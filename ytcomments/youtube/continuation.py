"""Wire encoding of continuation handles for the resume query parameters."""

from __future__ import annotations

import base64
import binascii
import json
from typing import Optional

from ytcomments.youtube.models import Continuation

_ENDPOINTS = frozenset({"search", "next", "browse"})


def encode_continuation(continuation: Continuation) -> str:
    """Encode a continuation handle into an opaque URL-safe string."""
    payload = json.dumps({"e": continuation.endpoint, "t": continuation.token})
    return base64.urlsafe_b64encode(payload.encode()).decode()


def decode_continuation(value: Optional[str]) -> Optional[Continuation]:
    """Decode a string from :func:`encode_continuation`. Returns None on invalid input."""
    if not value:
        return None
    try:
        data = json.loads(base64.urlsafe_b64decode(value.encode()))
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None
    if not isinstance(data, dict):
        return None

    endpoint = data.get("e")
    token = data.get("t")
    if endpoint not in _ENDPOINTS or not isinstance(token, str) or not token:
        return None
    return Continuation(endpoint=endpoint, token=token)
