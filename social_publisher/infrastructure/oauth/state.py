"""
Signed OAuth state.

The state parameter carries the user id and platform through the
provider's redirect. It is signed with HMAC so a callback cannot be forged
to attach an account to another user, and it expires.
"""

import base64
import hashlib
import hmac
import json
import time

STATE_MAX_AGE_SECONDS = 15 * 60


class InvalidStateError(ValueError):
    """The state parameter is malformed, tampered with or expired."""


def _sign(secret_key: str, payload: str) -> str:
    return hmac.new(secret_key.encode(), payload.encode(), hashlib.sha256).hexdigest()


def encode_state(user_id: str, platform: str, secret_key: str) -> str:
    """Build a signed state value for an authorization request."""
    body = json.dumps(
        {"userId": user_id, "platform": platform, "iat": int(time.time())},
        separators=(",", ":"),
    )
    payload = base64.urlsafe_b64encode(body.encode()).decode().rstrip("=")
    return f"{payload}.{_sign(secret_key, payload)}"


def decode_state(
    state: str,
    secret_key: str,
    max_age: int = STATE_MAX_AGE_SECONDS,
) -> tuple[str, str]:
    """
    Verify a state value and return (user_id, platform).

    Raises:
        InvalidStateError: Signature mismatch, bad encoding or expired state
    """
    payload, _, signature = state.partition(".")
    if not payload or not signature:
        raise InvalidStateError("Malformed state")

    if not hmac.compare_digest(signature, _sign(secret_key, payload)):
        raise InvalidStateError("State signature mismatch")

    try:
        padded = payload + "=" * (-len(payload) % 4)
        data = json.loads(base64.urlsafe_b64decode(padded))
        user_id = data["userId"]
        platform = data["platform"]
        issued_at = int(data.get("iat", 0))
    except (ValueError, KeyError, TypeError) as e:
        raise InvalidStateError("Malformed state") from e

    if time.time() - issued_at > max_age:
        raise InvalidStateError("State expired")

    return user_id, platform
