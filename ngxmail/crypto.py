"""Symmetric AES-GCM encryption of sensitive values at rest."""

from __future__ import annotations

import binascii
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

_NONCE_SIZE = 12
_KEY_SIZE = 32


class CryptoError(Exception):
    """Raised when a key is unusable or a value cannot be encrypted or decrypted."""


def _cipher(key: bytes) -> AESGCM:
    try:
        return AESGCM(bytes(key))
    except (TypeError, ValueError) as exc:
        raise CryptoError(f"aes cipher: {exc}") from exc


def encrypt(key: bytes, plaintext: bytes) -> bytes:
    """Encrypt plaintext; the result is nonce (12 bytes) + ciphertext + tag (16 bytes)."""
    cipher = _cipher(key)
    nonce = os.urandom(_NONCE_SIZE)
    return nonce + cipher.encrypt(nonce, bytes(plaintext), None)


def decrypt(key: bytes, ciphertext: bytes) -> bytes:
    """Decrypt a value produced by encrypt."""
    cipher = _cipher(key)
    data = bytes(ciphertext)
    if len(data) < _NONCE_SIZE:
        raise CryptoError("ciphertext too short")
    nonce, sealed = data[:_NONCE_SIZE], data[_NONCE_SIZE:]
    try:
        return cipher.decrypt(nonce, sealed, None)
    except InvalidTag as exc:
        raise CryptoError("aes-gcm decrypt: message authentication failed") from exc


def key_from_hex(hex_key: str) -> bytes:
    """Decode a 64-character hex string into a 32-byte AES-256 key."""
    if not hex_key:
        raise CryptoError("encryption key is not set (WEBHOOK_ENCRYPTION_KEY)")
    try:
        key = binascii.unhexlify(hex_key)
    except (binascii.Error, ValueError) as exc:
        raise CryptoError(f"decode hex key: {exc}") from exc
    if len(key) != _KEY_SIZE:
        raise CryptoError(
            f"key must be 32 bytes (64 hex chars), got {len(key)} bytes"
        )
    return key