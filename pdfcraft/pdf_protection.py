"""PDF standard security handler (revision 2, 40-bit RC4)."""

from __future__ import annotations

import hashlib
import secrets
import struct
from enum import IntFlag


class Permissions(IntFlag):
    """Permission bits a protected document grants."""

    PRINT = 4
    MODIFY = 8
    COPY = 16
    ANNOT_FORMS = 32


_PADDING = bytes([
    0x28, 0xBF, 0x4E, 0x5E, 0x4E, 0x75, 0x8A, 0x41, 0x64, 0x00, 0x4E, 0x56, 0xFF, 0xFA, 0x01, 0x08,
    0x2E, 0x2E, 0x00, 0xB6, 0xD0, 0x68, 0x3E, 0x80, 0x2F, 0x0C, 0xA9, 0xFE, 0x64, 0x53, 0x69, 0x7A,
])

_RANDOM_CHARS = "abcdef0123456789"


def _md5(data: bytes) -> bytes:
    return hashlib.md5(data, usedforsecurity=False).digest()


def rc4(key: bytes, data: bytes) -> bytes:
    """Encrypt or decrypt ``data`` with RC4 under ``key``."""
    if not 1 <= len(key) <= 256:
        raise ValueError(f"invalid rc4 key size {len(key)}")
    state = list(range(256))
    j = 0
    for i in range(256):
        j = (j + state[i] + key[i % len(key)]) & 0xFF
        state[i], state[j] = state[j], state[i]

    out = bytearray()
    i = j = 0
    for byte in data:
        i = (i + 1) & 0xFF
        j = (j + state[i]) & 0xFF
        state[i], state[j] = state[j], state[i]
        out.append(byte ^ state[(state[i] + state[j]) & 0xFF])
    return bytes(out)


def _as_bytes(value: bytes | str | None) -> bytes:
    if value is None:
        return b""
    if isinstance(value, str):
        return value.encode()
    return bytes(value)


class PDFProtection:
    """Holds the O, U and P entries and the key of an encrypted document."""

    def __init__(self) -> None:
        self.o_value = b""
        self.u_value = b""
        self.p_value = 0
        self.encryption_key = b""

    def set_protection(
        self,
        permissions: int,
        user_pass: bytes | str,
        owner_pass: bytes | str | None = None,
    ) -> None:
        """Compute the encryption entries; an empty owner password is replaced by a random one."""
        protection = 192 | int(permissions)
        owner = _as_bytes(owner_pass)
        if not owner:
            owner = "".join(secrets.choice(_RANDOM_CHARS) for _ in range(24)).encode()
        self._generate_encryption_key(_as_bytes(user_pass), owner, protection)

    def _generate_encryption_key(self, user: bytes, owner: bytes, protection: int) -> None:
        user_padded = (user + _PADDING)[:32]
        owner_padded = (owner + _PADDING)[:32]

        self.o_value = rc4(_md5(owner_padded)[:5], user_padded)

        digest = _md5(user_padded + self.o_value + bytes([protection & 0xFF, 0xFF, 0xFF, 0xFF]))
        self.encryption_key = digest[:5]
        self.u_value = rc4(self.encryption_key, _PADDING)
        self.p_value = -((protection ^ 255) + 1)

    def object_key(self, obj_id: int) -> bytes:
        """The RC4 key for the object with number ``obj_id``."""
        number = struct.pack("<I", obj_id & 0xFFFFFFFF)
        return _md5(self.encryption_key + number[:3] + b"\x00\x00")[:10]