import hashlib
import hmac
from datetime import datetime, timedelta, timezone

import pytest

from tasklic.common.crypto import FieldCipher, compute_checksum, format_timestamp
from tasklic.common.exceptions import DecryptionError

ARGS = ("k", "clientA", "app1", "LIC123", "2025-01-01T00:00:00.000Z")


def test_checksum_matches_hmac_over_concatenation() -> None:
    expected = hmac.new(
        b"k", b"clientAapp1LIC1232025-01-01T00:00:00.000Z", hashlib.sha256
    ).hexdigest()
    assert compute_checksum(*ARGS) == expected


def test_checksum_is_deterministic() -> None:
    assert compute_checksum(*ARGS) == compute_checksum(*ARGS)


@pytest.mark.parametrize("index", range(5))
def test_checksum_changes_with_any_input(index: int) -> None:
    changed = list(ARGS)
    changed[index] += "x"
    assert compute_checksum(*changed) != compute_checksum(*ARGS)


def test_format_timestamp_uses_milliseconds_and_z() -> None:
    value = datetime(2025, 1, 1, 12, 30, 5, 123456, tzinfo=timezone.utc)
    assert format_timestamp(value) == "2025-01-01T12:30:05.123Z"


def test_format_timestamp_converts_to_utc() -> None:
    value = datetime(2025, 1, 1, 2, 0, tzinfo=timezone(timedelta(hours=2)))
    assert format_timestamp(value) == "2025-01-01T00:00:00.000Z"


def test_format_timestamp_treats_naive_as_utc() -> None:
    assert format_timestamp(datetime(2025, 1, 1)) == "2025-01-01T00:00:00.000Z"


def test_field_cipher_round_trip() -> None:
    cipher = FieldCipher("secret")
    token = cipher.encrypt("mutual-key")
    assert token.startswith("v1:")
    assert "mutual-key" not in token
    assert cipher.decrypt(token) == "mutual-key"


def test_field_cipher_uses_fresh_nonce() -> None:
    cipher = FieldCipher("secret")
    assert cipher.encrypt("same") != cipher.encrypt("same")


def test_field_cipher_rejects_wrong_secret() -> None:
    token = FieldCipher("secret").encrypt("mutual-key")
    with pytest.raises(DecryptionError):
        FieldCipher("other").decrypt(token)


def test_field_cipher_rejects_tampering() -> None:
    cipher = FieldCipher("secret")
    token = cipher.encrypt("mutual-key")
    tampered = token[:-2] + ("00" if token[-2:] != "00" else "11")
    with pytest.raises(DecryptionError):
        cipher.decrypt(tampered)


@pytest.mark.parametrize("token", ["", "plain", "v2:abcd", "v1:zz"])
def test_field_cipher_rejects_malformed_values(token: str) -> None:
    with pytest.raises(DecryptionError):
        FieldCipher("secret").decrypt(token)
