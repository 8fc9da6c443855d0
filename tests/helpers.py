"""Test helpers: keychain encoding and signature checks."""

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from symbolchain.CryptoTypes import PublicKey, Signature
from symbolchain.facade.SymbolFacade import SymbolFacade

from keychain_tx.keychain import Keychain
from keychain_tx.shared import crypto

EC_CURVES = {crypto.CURVE_P256: ec.SECP256R1, crypto.CURVE_SECP256K1: ec.SECP256K1}


def encode_keychain(keychain: Keychain) -> bytes:
    """Binary keychain layout read by ``Keychain.decode``."""
    parts = [
        keychain.version.to_bytes(4, "big"),
        bytes([len(keychain.seed)]),
        keychain.seed,
        bytes([len(keychain.services)]),
    ]
    for name, service in keychain.services.items():
        name_bytes = name.encode("utf-8")
        path_bytes = service.derivation_path.encode("utf-8")
        parts += [
            bytes([len(name_bytes)]),
            name_bytes,
            bytes([len(path_bytes)]),
            path_bytes,
            bytes([service.curve, service.hash_algo]),
        ]
    return b"".join(parts)


def verify(public_key: bytes, data: bytes, signature: bytes) -> bool:
    """Check a signature made by ``crypto.sign`` with a curve-prefixed key."""
    curve, raw = public_key[0], public_key[2:]
    if curve == crypto.CURVE_ED25519:
        return SymbolFacade.Verifier(PublicKey(raw)).verify(data, Signature(signature))
    try:
        peer = ec.EllipticCurvePublicKey.from_encoded_point(EC_CURVES[curve](), raw)
        peer.verify(signature, data, ec.ECDSA(hashes.SHA256()))
    except InvalidSignature:
        return False
    return True


def address_of(fill: int, hash_algo: int = crypto.HASH_SHA256) -> bytes:
    """A well formed address whose digest repeats ``fill``."""
    return bytes([crypto.CURVE_ED25519, hash_algo]) + bytes([fill]) * crypto.digest_size(hash_algo)
