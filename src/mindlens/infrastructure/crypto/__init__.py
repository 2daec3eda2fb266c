"""Cryptography infrastructure package."""

from mindlens.infrastructure.crypto.payload_cipher import (
    SubmissionKey,
    PayloadCipher,
    KeyWrapper,
    canonical_json,
    hash_identifier,
    generate_key_encryption_key,
)

__all__ = [
    "SubmissionKey",
    "PayloadCipher",
    "KeyWrapper",
    "canonical_json",
    "hash_identifier",
    "generate_key_encryption_key",
]
