"""Validation and transformation of raw secret values."""
import re
import logging
from typing import List

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization

from .errors import ValidationError
from .models import KEY_SIZE, TLSCertificate

logger = logging.getLogger(__name__)

# Plain decimal integer, no surrounding whitespace or digit separators
_INTEGER_PATTERN = re.compile(rb'[+-]?[0-9]+')


def parse_positive_int(raw: bytes, label: str) -> int:
    """
    Parse a numeric identifier that must be >= 1.

    Args:
        raw: Raw secret value
        label: Field label used in error messages (e.g. "app ID")

    Returns:
        The parsed integer

    Raises:
        ValidationError: If the value is not an integer or is less than 1
    """
    if not _INTEGER_PATTERN.fullmatch(raw):
        raise ValidationError(f"{label} must be a valid integer")
    value = int(raw)
    if value < 1:
        raise ValidationError(f"{label} must be >= 1: {value}")
    return value


def require_key_length(raw: bytes, label: str, size: int = KEY_SIZE) -> bytes:
    """
    Check that a symmetric key has exactly ``size`` bytes.

    Returns:
        A copy of the key as immutable bytes

    Raises:
        ValidationError: If the length differs
    """
    if len(raw) != size:
        raise ValidationError(
            f"bad {label}: length must be exactly {size} bytes, value size: {len(raw)}"
        )
    return bytes(raw)


def split_api_keys(raw: bytes) -> List[str]:
    """Split a comma-delimited list exactly; empty elements are preserved."""
    return raw.decode("utf-8", "surrogateescape").split(",")


def _public_der(key) -> bytes:
    return key.public_bytes(
        serialization.Encoding.DER,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def load_tls_pair(cert_pem: bytes, key_pem: bytes) -> TLSCertificate:
    """
    Build a certificate/key pair from PEM data.

    The first certificate in ``cert_pem`` is the leaf; any following ones are
    kept as the chain. The leaf's public key must belong to the private key.

    Args:
        cert_pem: PEM-encoded certificate chain
        key_pem: PEM-encoded private key (unencrypted)

    Returns:
        TLSCertificate holding the parsed objects and the original PEM bytes

    Raises:
        ValidationError: If either side does not parse or the pair does not match
    """
    try:
        chain = x509.load_pem_x509_certificates(cert_pem)
        private_key = serialization.load_pem_private_key(key_pem, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise ValidationError(f"error parsing TLS cert/key: {e}") from e

    leaf = chain[0]
    try:
        matches = _public_der(leaf.public_key()) == _public_der(private_key.public_key())
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise ValidationError(f"error parsing TLS cert/key: {e}") from e
    if not matches:
        raise ValidationError("error parsing TLS cert/key: private key does not match public key")

    logger.debug(f"Loaded TLS certificate for subject {leaf.subject.rfc4514_string()}")
    return TLSCertificate(
        certificate=leaf,
        private_key=private_key,
        chain=chain,
        certificate_pem=bytes(cert_pem),
        key_pem=bytes(key_pem),
    )
