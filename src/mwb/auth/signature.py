"""
Ed25519 challenge signature verification.

Clients derive an Ed25519 key pair from their mnemonic and sign the raw
challenge code. Public keys and signatures travel as base64url (padding
optional).

Uses the cryptography package; no key material is ever stored server-side
beyond the public key.
"""

from __future__ import annotations

import base64
import binascii

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

PUBLIC_KEY_LENGTH = 32
SIGNATURE_LENGTH = 64


def decode_base64url(value: str) -> bytes:
    """Decode base64url with or without padding.

    Raises:
        ValueError: If the value is not valid base64url.
    """
    padded = value + "=" * (-len(value) % 4)
    try:
        return base64.urlsafe_b64decode(padded.encode("ascii"))
    except (binascii.Error, UnicodeEncodeError) as e:
        msg = "Invalid base64url value"
        raise ValueError(msg) from e


def verify_challenge_signature(public_key: str, message: str, signature: str) -> bool:
    """
    Verify that ``signature`` over ``message`` was produced by ``public_key``.

    Args:
        public_key: base64url-encoded 32-byte Ed25519 public key.
        message: The challenge code exactly as issued.
        signature: base64url-encoded 64-byte Ed25519 signature.

    Returns:
        True if the signature is valid, False for any malformed input or
        mismatch.
    """
    try:
        key_bytes = decode_base64url(public_key)
        sig_bytes = decode_base64url(signature)
    except ValueError:
        return False

    if len(key_bytes) != PUBLIC_KEY_LENGTH or len(sig_bytes) != SIGNATURE_LENGTH:
        return False

    try:
        Ed25519PublicKey.from_public_bytes(key_bytes).verify(sig_bytes, message.encode("utf-8"))
    except (InvalidSignature, ValueError):
        return False
    return True
