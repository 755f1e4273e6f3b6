"""TLS certificate helpers for running the server in HTTPS mode.

Functions:
    ensure_certificate(cert_path: str = '', key_path: str = '', cache_dir: str = '') -> tuple[str, str]
        Return usable certificate/key paths, generating a self-signed pair when none is configured.

NOTE:
    The generated certificate is meant for local and test deployments. Production
    setups should point TLS_CERT_PATH/TLS_KEY_PATH at a certificate issued by a CA.
"""

import os
import logging
import tempfile
import ipaddress
from datetime import datetime, timedelta, UTC

from cryptography import x509
from cryptography.x509.oid import NameOID
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from shortener.exceptions import BadConfigurationError


logger = logging.getLogger(__name__)

CERT_FILENAME = 'shortener-cert.pem'
KEY_FILENAME = 'shortener-key.pem'
CERT_VALIDITY = timedelta(days=365)


def ensure_certificate(cert_path: str = '', key_path: str = '', cache_dir: str = '') -> tuple[str, str]:
    """Resolve the certificate and private key used by the HTTPS server

    Args:
        cert_path (str): PEM certificate path. Must be given together with key_path.
        key_path (str): PEM private key path.
        cache_dir (str): directory holding the generated pair. Defaults to '<tmp>/shortener-certs'.

    Returns:
        tuple[str, str]: (certificate path, key path)

    Raises:
        BadConfigurationError: if only one of the paths is given or a given file is missing.
    """
    if cert_path or key_path:
        if not (cert_path and key_path):
            raise BadConfigurationError('Both TLS certificate and key paths must be configured.')
        for path in (cert_path, key_path):
            if not os.path.isfile(path):
                raise BadConfigurationError(f"TLS file '{path}' does not exist.")
        return cert_path, key_path

    cache_dir = cache_dir or os.path.join(tempfile.gettempdir(), 'shortener-certs')
    cert_path = os.path.join(cache_dir, CERT_FILENAME)
    key_path = os.path.join(cache_dir, KEY_FILENAME)
    if os.path.isfile(cert_path) and os.path.isfile(key_path):
        return cert_path, key_path

    os.makedirs(cache_dir, exist_ok=True)
    cert_pem, key_pem = generate_self_signed_certificate()
    with open(key_path, 'wb') as f:
        f.write(key_pem)
    os.chmod(key_path, 0o600)
    with open(cert_path, 'wb') as f:
        f.write(cert_pem)

    logger.warning(
        'Generated self-signed TLS certificate.',
        extra={'cert_path': cert_path, 'event': 'TLS_SELF_SIGNED_CERTIFICATE'},
    )
    return cert_path, key_path


def generate_self_signed_certificate(hostname: str = 'localhost') -> tuple[bytes, bytes]:
    """Generate a PEM-encoded (certificate, private key) pair valid for localhost."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, hostname)])
    now = datetime.now(UTC)

    certificate = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + CERT_VALIDITY)
        .add_extension(
            x509.SubjectAlternativeName(
                [
                    x509.DNSName(hostname),
                    x509.IPAddress(ipaddress.ip_address('127.0.0.1')),
                ]
            ),
            critical=False,
        )
        .sign(private_key, hashes.SHA256())
    )

    cert_pem = certificate.public_bytes(serialization.Encoding.PEM)
    key_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return cert_pem, key_pem
