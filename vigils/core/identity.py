"""
Durable cryptographic identity for talking to remote storage endpoints,
plus the signature primitives shared with admin authentication.

Keys are secp256k1. Signatures are ECDSA over SHA-256 of the UTF-8 message,
hex encoded as the 64-byte compact r||s form.
"""

import json
import threading
from pathlib import Path
from typing import Optional, Tuple, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature, encode_dss_signature
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from .schema import IdentityCredential
from util.logging import logger, redact_credential

# Order of the secp256k1 group
CURVE_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141


class IdentityError(Exception):
    """Raised when the credential file cannot be read or written."""
    pass


def _private_key_from_hex(private_key_hex: str) -> ec.EllipticCurvePrivateKey:
    return ec.derive_private_key(int(private_key_hex, 16), ec.SECP256K1())


def _public_key_hex(private_key: ec.EllipticCurvePrivateKey) -> str:
    return private_key.public_key().public_bytes(Encoding.X962, PublicFormat.CompressedPoint).hex()


def generate_keys() -> Tuple[str, str]:
    """Generate a new keypair. Returns (private_key_hex, compressed_public_key_hex)."""
    private_key = ec.generate_private_key(ec.SECP256K1())
    private_hex = private_key.private_numbers().private_value.to_bytes(32, "big").hex()
    return private_hex, _public_key_hex(private_key)


def public_key_for(private_key_hex: str) -> str:
    """Derive the compressed public key for a private key."""
    return _public_key_hex(_private_key_from_hex(private_key_hex))


def sign_message(private_key_hex: str, message: str) -> str:
    """Sign a message and return the compact hex signature (low-S normalized)."""
    private_key = _private_key_from_hex(private_key_hex)
    der = private_key.sign(message.encode("utf-8"), ec.ECDSA(hashes.SHA256()))
    r, s = decode_dss_signature(der)
    if s > CURVE_ORDER // 2:
        s = CURVE_ORDER - s
    return (r.to_bytes(32, "big") + s.to_bytes(32, "big")).hex()


def verify_signature(signature_hex: str, message: str, public_key_hex: str) -> bool:
    """Verify a compact hex signature. Malformed input verifies as False."""
    try:
        raw = bytes.fromhex(signature_hex)
        if len(raw) != 64:
            return False
        r = int.from_bytes(raw[:32], "big")
        s = int.from_bytes(raw[32:], "big")
        # Only the low-S form is canonical
        if s > CURVE_ORDER // 2:
            return False
        public_key = ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256K1(), bytes.fromhex(public_key_hex))
        public_key.verify(encode_dss_signature(r, s), message.encode("utf-8"), ec.ECDSA(hashes.SHA256()))
        return True
    except (InvalidSignature, ValueError, TypeError):
        return False


def new_credential() -> IdentityCredential:
    private_hex, public_hex = generate_keys()
    return IdentityCredential(private_key=private_hex, public_key=public_hex)


class IdentityStore:
    """
    Loads and saves the credential file.

    The file is read at most once per process; after that the in-memory copy
    is authoritative.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._credential: Optional[IdentityCredential] = None
        self._loaded = False
        self._lock = threading.Lock()

    def load(self) -> Optional[IdentityCredential]:
        with self._lock:
            if self._loaded:
                return self._credential

            self._loaded = True
            if not self.path.exists():
                logger.info(f"No credential file at {self.path}")
                return None

            try:
                data = json.loads(self.path.read_text(encoding="utf-8"))
                self._credential = IdentityCredential.from_dict(data)
            except (OSError, ValueError, KeyError, TypeError) as e:
                raise IdentityError(f"Unreadable credential file {self.path}: {e}") from e

            logger.log_operation("identity.load", "success", {"path": str(self.path), "has_uuid": bool(self._credential.uuid)})
            return self._credential

    def save(self, credential: IdentityCredential, remote_identity: Optional[str] = None) -> IdentityCredential:
        """Persist the keypair and remote identifier together."""
        if remote_identity:
            credential = IdentityCredential(credential.private_key, credential.public_key, remote_identity)

        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self.path.write_text(json.dumps(credential.to_dict(), indent=2), encoding="utf-8")
            except OSError as e:
                raise IdentityError(f"Could not write credential file {self.path}: {e}") from e

            self._credential = credential
            self._loaded = True

        logger.log_operation("identity.save", "success", {"path": str(self.path), **redact_credential(credential.to_dict())})
        return credential
