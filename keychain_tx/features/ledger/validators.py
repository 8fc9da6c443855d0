"""Input validators for ledger entries."""

from dataclasses import dataclass
from typing import Any

from keychain_tx.shared import crypto

MAX_UINT64 = 2**64 - 1
MIN_INT64 = -(2**63)
MAX_INT64 = 2**63 - 1
ADDRESS_PREFIX_SIZE = 2


@dataclass
class ValidationResult:
    is_valid: bool
    error_message: str | None = None
    normalized_value: Any = None


def decode_hex(value: str) -> bytes | None:
    try:
        return bytes.fromhex(value.strip())
    except ValueError:
        return None


class AddressValidator:
    """Validator for hex encoded ``curve ‖ hash id ‖ digest`` addresses.

    The expected length is the two prefix bytes plus the digest size of the
    hash algorithm named by the second byte.
    """

    @staticmethod
    def validate(value: str) -> ValidationResult:
        if not value or not value.strip():
            return ValidationResult(
                is_valid=False,
                error_message="Address is required",
            )

        decoded = decode_hex(value)
        if decoded is None:
            return ValidationResult(
                is_valid=False,
                error_message="Address must be hexadecimal",
            )

        if len(decoded) <= ADDRESS_PREFIX_SIZE:
            return ValidationResult(
                is_valid=False,
                error_message="Address is too short",
            )

        hash_algo = decoded[1]
        size = crypto.digest_size(hash_algo)
        if size is None:
            return ValidationResult(
                is_valid=False,
                error_message=f"Unknown hash algorithm id {hash_algo}",
            )

        expected_length = ADDRESS_PREFIX_SIZE + size
        if len(decoded) != expected_length:
            return ValidationResult(
                is_valid=False,
                error_message=f"Address must be {expected_length} bytes, got {len(decoded)}",
            )

        return ValidationResult(is_valid=True, normalized_value=decoded)


class AmountValidator:
    @staticmethod
    def validate(value: str) -> ValidationResult:
        if not value or not value.strip():
            return ValidationResult(
                is_valid=False,
                error_message="Amount is required",
            )

        raw_amount = value.strip()
        if not (raw_amount.isascii() and raw_amount.isdigit()):
            return ValidationResult(
                is_valid=False,
                error_message="Amount must be a non-negative integer",
            )

        amount = int(raw_amount)
        if amount > MAX_UINT64:
            return ValidationResult(
                is_valid=False,
                error_message="Amount exceeds maximum allowed value",
            )

        return ValidationResult(is_valid=True, normalized_value=amount)


class TokenIdValidator:
    @staticmethod
    def validate(value: str) -> ValidationResult:
        if not value or not value.strip():
            return ValidationResult(
                is_valid=False,
                error_message="Token ID is required",
            )

        try:
            token_id = int(value.strip(), 10)
        except ValueError:
            return ValidationResult(
                is_valid=False,
                error_message="Token ID must be an integer",
            )

        if not MIN_INT64 <= token_id <= MAX_INT64:
            return ValidationResult(
                is_valid=False,
                error_message="Token ID must fit in a signed 64-bit integer",
            )

        return ValidationResult(is_valid=True, normalized_value=token_id)


class PublicKeyValidator:
    KNOWN_CURVES = (0, 1, 2)

    @classmethod
    def validate(cls, value: str) -> ValidationResult:
        if not value or not value.strip():
            return ValidationResult(
                is_valid=False,
                error_message="Public key is required",
            )

        decoded = decode_hex(value)
        if decoded is None:
            return ValidationResult(
                is_valid=False,
                error_message="Public key must be hexadecimal",
            )

        if len(decoded) < 3 or decoded[0] not in cls.KNOWN_CURVES:
            return ValidationResult(
                is_valid=False,
                error_message="Public key must start with a known curve prefix",
            )

        return ValidationResult(is_valid=True, normalized_value=decoded)
