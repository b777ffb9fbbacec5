"""Autokey XOR stream cipher used to obscure command and reply documents.

The running key starts at :data:`INITIAL_KEY` for every call and is then
replaced by each ciphertext byte, in both directions. A corrupted
ciphertext byte therefore garbles only the plaintext byte at its own
position and the one after it.
"""

from __future__ import annotations

INITIAL_KEY = 171  # 0xAB


def encrypt(data: bytes) -> bytes:
    """Cipher plaintext bytes with a fresh running key."""
    key = INITIAL_KEY
    result = bytearray(len(data))
    for pos, plain in enumerate(data):
        key = plain ^ key
        result[pos] = key
    return bytes(result)


def decrypt(data: bytes) -> bytes:
    """Decipher bytes produced by :func:`encrypt`."""
    key = INITIAL_KEY
    result = bytearray(len(data))
    for pos, cipher in enumerate(data):
        result[pos] = cipher ^ key
        key = cipher
    return bytes(result)
