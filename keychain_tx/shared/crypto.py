"""Cryptographic primitives consumed by the transaction form.

Keys carry the Archethic two byte prefix ``curve ‖ origin``. Ed25519 keys are
handled through the Symbol SDK (same curve, standard Ed25519), NIST P-256 and
secp256k1 keys through ``cryptography``.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import os
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat
from symbolchain.CryptoTypes import PrivateKey, PublicKey
from symbolchain.facade.SymbolFacade import SymbolFacade
from symbolchain.symbol.MessageEncoder import MessageEncoder

logger = logging.getLogger(__name__)

CURVE_ED25519 = 0
CURVE_P256 = 1
CURVE_SECP256K1 = 2

ORIGIN_ON_CHAIN = 0
ORIGIN_SOFTWARE = 1

HASH_SHA256 = 0
HASH_SHA512 = 1
HASH_SHA3_256 = 2
HASH_SHA3_512 = 3
HASH_BLAKE2B = 4

SECRET_KEY_SIZE = 32
AES_IV_SIZE = 12
AES_TAG_SIZE = 16
EC_POINT_SIZE = 65
ED25519_KEY_SIZE = 32

_EC_CURVES = {
    CURVE_P256: ec.SECP256R1,
    CURVE_SECP256K1: ec.SECP256K1,
}

_HASH_FUNCTIONS = {
    HASH_SHA256: hashlib.sha256,
    HASH_SHA512: hashlib.sha512,
    HASH_SHA3_256: hashlib.sha3_256,
    HASH_SHA3_512: hashlib.sha3_512,
    HASH_BLAKE2B: hashlib.blake2b,
}

_ECIES_INFO = b"archethic-keychain-tx ecies"


class CryptoError(Exception):
    """Raised when a key, ciphertext or signature cannot be processed."""


class SessionKeyError(CryptoError):
    """The process could not obtain randomness for the session key."""


@dataclass(frozen=True)
class KeyPair:
    public_key: bytes
    private_key: bytes

    @property
    def curve(self) -> int:
        return self.public_key[0]


def generate_secret_key() -> bytes:
    try:
        return os.urandom(SECRET_KEY_SIZE)
    except NotImplementedError as e:
        raise SessionKeyError("No randomness source available for the session key") from e


def _split_key(key: bytes) -> tuple[int, bytes]:
    if len(key) < 3:
        raise CryptoError("Key is too short")
    curve = key[0]
    if curve != CURVE_ED25519 and curve not in _EC_CURVES:
        raise CryptoError(f"Unsupported curve id {curve}")
    return curve, key[2:]


def aes_encrypt(plaintext: bytes, key: bytes) -> bytes:
    if len(key) != SECRET_KEY_SIZE:
        raise CryptoError("AES key must be 32 bytes")
    iv = os.urandom(AES_IV_SIZE)
    sealed = AESGCM(key).encrypt(iv, plaintext, None)
    ciphertext, tag = sealed[:-AES_TAG_SIZE], sealed[-AES_TAG_SIZE:]
    return iv + tag + ciphertext


def aes_decrypt(cipher: bytes, key: bytes) -> bytes:
    if len(cipher) < AES_IV_SIZE + AES_TAG_SIZE:
        raise CryptoError("Ciphertext is too short")
    iv = cipher[:AES_IV_SIZE]
    tag = cipher[AES_IV_SIZE : AES_IV_SIZE + AES_TAG_SIZE]
    ciphertext = cipher[AES_IV_SIZE + AES_TAG_SIZE :]
    try:
        return AESGCM(key).decrypt(iv, ciphertext + tag, None)
    except InvalidTag as e:
        raise CryptoError("Unable to decrypt: authentication failed") from e


def _ecies_key(shared_secret: bytes) -> bytes:
    return HKDF(
        algorithm=hashes.SHA256(),
        length=SECRET_KEY_SIZE,
        salt=None,
        info=_ECIES_INFO,
    ).derive(shared_secret)


def ec_encrypt(payload: bytes, public_key: bytes) -> bytes:
    """Encrypt ``payload`` so that only the owner of ``public_key`` can read it.

    The output starts with a fresh ephemeral public key followed by the
    AES-GCM sealed payload keyed by the ephemeral/recipient shared secret.
    """
    curve, raw = _split_key(public_key)

    if curve == CURVE_ED25519:
        if len(raw) != ED25519_KEY_SIZE:
            raise CryptoError("Ed25519 public key must be 32 bytes")
        ephemeral = SymbolFacade.KeyPair(PrivateKey.random())
        encoded = MessageEncoder(ephemeral).encode(PublicKey(raw), payload)
        return ephemeral.public_key.bytes + encoded

    ec_curve = _EC_CURVES[curve]()
    try:
        peer = ec.EllipticCurvePublicKey.from_encoded_point(ec_curve, raw)
    except ValueError as e:
        raise CryptoError("Invalid elliptic curve public key") from e
    ephemeral_key = ec.generate_private_key(ec_curve)
    shared = ephemeral_key.exchange(ec.ECDH(), peer)
    ephemeral_point = ephemeral_key.public_key().public_bytes(
        Encoding.X962, PublicFormat.UncompressedPoint
    )
    return ephemeral_point + aes_encrypt(payload, _ecies_key(shared))


def ec_decrypt(cipher: bytes, private_key: bytes) -> bytes:
    curve, raw = _split_key(private_key)

    if curve == CURVE_ED25519:
        ephemeral_public, encoded = cipher[:ED25519_KEY_SIZE], cipher[ED25519_KEY_SIZE:]
        key_pair = SymbolFacade.KeyPair(PrivateKey(raw))
        decoded, message = MessageEncoder(key_pair).try_decode(
            PublicKey(ephemeral_public), encoded
        )
        if not decoded:
            raise CryptoError("Unable to decrypt: authentication failed")
        return message

    ec_curve = _EC_CURVES[curve]()
    ephemeral_point, sealed = cipher[:EC_POINT_SIZE], cipher[EC_POINT_SIZE:]
    try:
        peer = ec.EllipticCurvePublicKey.from_encoded_point(ec_curve, ephemeral_point)
    except ValueError as e:
        raise CryptoError("Invalid ephemeral public key") from e
    own_key = ec.derive_private_key(int.from_bytes(raw, "big"), ec_curve)
    shared = own_key.exchange(ec.ECDH(), peer)
    return aes_decrypt(sealed, _ecies_key(shared))


def derive_private_key(seed: bytes, index: int) -> bytes:
    digest = hashlib.sha512(seed).digest()
    master_key, master_entropy = digest[:32], digest[32:]
    extended_seed = master_key + index.to_bytes(4, "big")
    return hmac.new(master_entropy, extended_seed, hashlib.sha512).digest()[:32]


def keypair_from_private_key(
    raw_private_key: bytes, curve: int = CURVE_ED25519, origin: int = ORIGIN_SOFTWARE
) -> KeyPair:
    prefix = bytes([curve, origin])
    if curve == CURVE_ED25519:
        public_raw = SymbolFacade.KeyPair(PrivateKey(raw_private_key)).public_key.bytes
    elif curve in _EC_CURVES:
        private = ec.derive_private_key(
            int.from_bytes(raw_private_key, "big"), _EC_CURVES[curve]()
        )
        public_raw = private.public_key().public_bytes(
            Encoding.X962, PublicFormat.UncompressedPoint
        )
    else:
        raise CryptoError(f"Unsupported curve id {curve}")
    return KeyPair(public_key=prefix + public_raw, private_key=prefix + raw_private_key)


def derive_keypair(
    seed: bytes, index: int, curve: int = CURVE_ED25519, origin: int = ORIGIN_SOFTWARE
) -> KeyPair:
    return keypair_from_private_key(derive_private_key(seed, index), curve, origin)


def digest_size(hash_algo: int) -> int | None:
    """Digest length in bytes for a hash algorithm id, None when unknown."""
    hash_function = _HASH_FUNCTIONS.get(hash_algo)
    return hash_function().digest_size if hash_function else None


def hash_with(data: bytes, hash_algo: int = HASH_SHA256) -> bytes:
    try:
        return _HASH_FUNCTIONS[hash_algo](data).digest()
    except KeyError as e:
        raise CryptoError(f"Unsupported hash algorithm id {hash_algo}") from e


def derive_address(public_key: bytes, hash_algo: int = HASH_SHA256) -> bytes:
    return bytes([public_key[0], hash_algo]) + hash_with(public_key, hash_algo)


def sign(private_key: bytes, data: bytes) -> bytes:
    curve, raw = _split_key(private_key)
    if curve == CURVE_ED25519:
        return SymbolFacade.KeyPair(PrivateKey(raw)).sign(data).bytes
    signer = ec.derive_private_key(int.from_bytes(raw, "big"), _EC_CURVES[curve]())
    return signer.sign(data, ec.ECDSA(hashes.SHA256()))
