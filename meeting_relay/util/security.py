from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SignatureCheck:
    ok: bool
    reason: str = ""


def compute_signature(secret: str, raw_body: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()


def _normalize_signature(header_value: str) -> Optional[str]:
    """
    Accepts a bare hex digest or the 'sha256=<hex>' form.
    Returns the hex digest as presented, or None if the value is not hex.
    """
    sig = header_value.strip()
    if sig.startswith("sha256="):
        sig = sig[len("sha256="):]
    if not sig:
        return None
    try:
        bytes.fromhex(sig)
    except ValueError:
        return None
    return sig


def verify_hmac_signature(
    *,
    secret: str,
    header_value: Optional[str],
    raw_body: bytes,
    require_signature: bool = False,
) -> SignatureCheck:
    """
    HMAC-SHA256 verification of an inbound webhook body.

    The digest is computed over the exact raw bytes (before JSON parsing) and
    compared in constant time.

    Policy for a request without a signature header is explicit:
    - require_signature=True rejects it
    - require_signature=False lets it through unauthenticated

    A presented signature is always checked; if there is no secret to check it
    against the request is rejected rather than waved through.
    """
    if not header_value or not header_value.strip():
        if require_signature:
            return SignatureCheck(ok=False, reason="missing_signature_header")
        return SignatureCheck(ok=True, reason="signature_not_provided")

    if not secret:
        return SignatureCheck(ok=False, reason="secret_not_configured")

    provided = _normalize_signature(header_value)
    if provided is None:
        return SignatureCheck(ok=False, reason="invalid_signature_format")

    expected = compute_signature(secret, raw_body)
    if not hmac.compare_digest(expected, provided):
        return SignatureCheck(ok=False, reason="signature_mismatch")
    return SignatureCheck(ok=True)
