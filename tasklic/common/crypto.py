"""Common cryptographic utilities.
"""

from __future__ import annotations

import hashlib
import hmac
import os
from datetime import datetime, timezone

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from tasklic.common.exceptions import DecryptionError

CIPHER_VERSION = "v1"
NONCE_SIZE = 12


def format_timestamp(value: datetime) -> str:
    """Render an instant as UTC ISO-8601 with milliseconds and a Z suffix.

    This is the form the license authority signs, e.g.
    ``2025-01-01T00:00:00.000Z``. Naive datetimes are taken as UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def compute_checksum(
    mutual_key: str,
    client_id: str,
    application_id: str,
    license_key: str,
    valid_till_iso: str,
) -> str:
    """HMAC-SHA256 over the concatenated license fields, keyed by the mutual key.

    The order (client, application, license key, expiry) and the absence of
    separators must match what the authority used at issuance.
    """
    message = client_id + application_id + license_key + valid_till_iso
    return hmac.new(
        mutual_key.encode(), message.encode(), hashlib.sha256
    ).hexdigest()


class FieldCipher:
    """Authenticated encryption for individual stored fields.

    Values are encoded as ``v1:<hex(nonce || ciphertext || tag)>`` with a
    fresh random nonce per call.
    """

    def __init__(self, secret: str) -> None:
        key = HKDF(
            algorithm=hashes.SHA256(),
            length=32,
            salt=b"tasklic-field-cipher",
            info=CIPHER_VERSION.encode(),
        ).derive(secret.encode())
        self._aead = ChaCha20Poly1305(key)

    def encrypt(self, plaintext: str) -> str:
        nonce = os.urandom(NONCE_SIZE)
        sealed = self._aead.encrypt(nonce, plaintext.encode(), CIPHER_VERSION.encode())
        return f"{CIPHER_VERSION}:{(nonce + sealed).hex()}"

    def decrypt(self, token: str) -> str:
        version, _, payload = token.partition(":")
        if version != CIPHER_VERSION or not payload:
            msg = "Unsupported encrypted value format"
            raise DecryptionError(msg)
        try:
            raw = bytes.fromhex(payload)
            plaintext = self._aead.decrypt(
                raw[:NONCE_SIZE], raw[NONCE_SIZE:], CIPHER_VERSION.encode()
            )
        except (ValueError, InvalidTag) as err:
            msg = "Encrypted value could not be decrypted"
            raise DecryptionError(msg) from err
        return plaintext.decode()
