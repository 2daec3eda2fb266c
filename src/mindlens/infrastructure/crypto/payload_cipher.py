"""
Payload Encryption

AES-256-GCM encryption for assessment payloads and face scans.

SECURITY:
- A fresh SubmissionKey is generated for every submission and never reused.
- SubmissionKey cannot be copied or pickled; destroy() zeroes its buffer.
- Key material is never logged and never stored next to its ciphertext.
"""

import base64
import hashlib
import json
import os
from typing import Any, Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from mindlens.config.logging_config import get_logger
from mindlens.domain.errors import EncryptionError
from mindlens.domain.models.submission import AES_256_GCM, EncryptedPayload

logger = get_logger(__name__)

KEY_LENGTH_BYTES = 32  # 256 bits
IV_LENGTH_BYTES = 12  # 96 bits for GCM


class SubmissionKey:
    """
    Per-submission symmetric key.

    Owned by the single submission that generated it. Copying and
    pickling are refused so the key cannot leak into shared state.

    Usage:
        with SubmissionKey.generate() as key:
            payload = cipher.encrypt(data, key)
        # key material is zeroed here
    """

    __slots__ = ("_material", "_destroyed", "_key_id")

    def __init__(self, material: bytes) -> None:
        if len(material) != KEY_LENGTH_BYTES:
            raise EncryptionError(
                f"key must be {KEY_LENGTH_BYTES} bytes, got {len(material)}"
            )
        self._material = bytearray(material)
        self._destroyed = False
        # Non-secret short fingerprint for correlation in tests and audit
        self._key_id = hashlib.sha256(material).hexdigest()[:16]

    @classmethod
    def generate(cls) -> "SubmissionKey":
        """Generate a fresh random 256-bit key."""
        return cls(AESGCM.generate_key(bit_length=256))

    @property
    def key_id(self) -> str:
        return self._key_id

    @property
    def is_destroyed(self) -> bool:
        return self._destroyed

    def material(self) -> bytes:
        """Raw key bytes. Fails once the key has been destroyed."""
        if self._destroyed:
            raise EncryptionError("submission key has been destroyed")
        return bytes(self._material)

    def destroy(self) -> None:
        """Zero the key buffer. Idempotent."""
        for i in range(len(self._material)):
            self._material[i] = 0
        self._destroyed = True

    def __enter__(self) -> "SubmissionKey":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.destroy()

    def __copy__(self):
        raise TypeError("SubmissionKey cannot be copied")

    def __deepcopy__(self, memo):
        raise TypeError("SubmissionKey cannot be copied")

    def __reduce_ex__(self, protocol):
        raise TypeError("SubmissionKey cannot be pickled")

    def __repr__(self) -> str:
        state = "destroyed" if self._destroyed else "live"
        return f"SubmissionKey(key_id={self._key_id!r}, {state})"


class PayloadCipher:
    """
    AES-256-GCM cipher.

    Every encrypt call draws a new random IV, so encrypting identical
    plaintext twice never yields identical ciphertext.
    """

    algorithm = AES_256_GCM

    def encrypt(
        self,
        plaintext: bytes,
        key: SubmissionKey,
        associated_data: Optional[bytes] = None,
    ) -> EncryptedPayload:
        """
        Encrypt plaintext with the given key.

        Raises:
            EncryptionError: If the key is destroyed or encryption fails
        """
        iv = os.urandom(IV_LENGTH_BYTES)
        try:
            ciphertext = AESGCM(key.material()).encrypt(iv, plaintext, associated_data)
        except EncryptionError:
            raise
        except Exception as e:
            raise EncryptionError(str(e), original_error=e) from e

        return EncryptedPayload(ciphertext=ciphertext, iv=iv, algorithm=self.algorithm)

    def decrypt(
        self,
        payload: EncryptedPayload,
        key: SubmissionKey,
        associated_data: Optional[bytes] = None,
    ) -> bytes:
        """
        Decrypt a payload.

        Raises:
            EncryptionError: On wrong key, tampered data or unsupported algorithm
        """
        if payload.algorithm != self.algorithm:
            raise EncryptionError(f"unsupported algorithm {payload.algorithm}")
        try:
            return AESGCM(key.material()).decrypt(payload.iv, payload.ciphertext, associated_data)
        except InvalidTag as e:
            raise EncryptionError("authentication tag mismatch", original_error=e) from e


class KeyWrapper:
    """
    Escrow for submission keys.

    Wraps a submission key under a long-lived key-encryption-key so it
    can be stored under its own locator, separate from the ciphertext.
    Deleting the wrapped key erases the submission.
    """

    def __init__(self, key_encryption_key: bytes) -> None:
        if len(key_encryption_key) != KEY_LENGTH_BYTES:
            raise EncryptionError(
                f"key-encryption-key must be {KEY_LENGTH_BYTES} bytes"
            )
        self._kek = SubmissionKey(key_encryption_key)
        self._cipher = PayloadCipher()

    @classmethod
    def from_base64(cls, encoded: str) -> "KeyWrapper":
        try:
            material = base64.b64decode(encoded, validate=True)
        except ValueError as e:
            raise EncryptionError("key-encryption-key is not valid base64", original_error=e) from e
        return cls(material)

    def wrap(self, key: SubmissionKey, session_id: str) -> EncryptedPayload:
        """Wrap a key; the session id is bound as associated data."""
        return self._cipher.encrypt(key.material(), self._kek, session_id.encode("utf-8"))

    def unwrap(self, wrapped: EncryptedPayload, session_id: str) -> SubmissionKey:
        material = self._cipher.decrypt(wrapped, self._kek, session_id.encode("utf-8"))
        return SubmissionKey(material)


def canonical_json(obj: Any) -> bytes:
    """Canonical byte form: sorted keys, compact separators, UTF-8."""
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    ).encode("utf-8")


def hash_identifier(identifier: str) -> str:
    """
    SHA-256 hex digest of an identifier.

    Used for pseudonymous ids on research records.
    """
    return hashlib.sha256(identifier.encode("utf-8")).hexdigest()


def generate_key_encryption_key() -> str:
    """Generate a base64 key-encryption-key (run once, store as a secret)."""
    return base64.b64encode(AESGCM.generate_key(bit_length=256)).decode("ascii")
