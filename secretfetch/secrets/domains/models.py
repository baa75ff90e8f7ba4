"""Destination configuration objects populated from secrets."""
from dataclasses import dataclass, field
from typing import Any, List, Optional

# Size of the symmetric keys used for OAuth cookies and user tokens
KEY_SIZE = 32


def _zero_key() -> bytes:
    return bytes(KEY_SIZE)


@dataclass
class TLSCertificate:
    """Parsed certificate chain and its matching private key."""
    certificate: Any  # cryptography.x509.Certificate (leaf)
    private_key: Any  # cryptography private key object
    chain: List[Any]
    certificate_pem: bytes
    key_pem: bytes


@dataclass
class AWSCredentials:
    """Cloud credentials."""
    access_key_id: str = ""
    secret_access_key: str = ""


@dataclass
class GithubOAuthConfig:
    """GitHub App OAuth settings."""
    app_installation_id: int = 0
    client_id: str = ""
    client_secret: str = ""
    cookie_auth_key: bytes = field(default_factory=_zero_key)
    cookie_enc_key: bytes = field(default_factory=_zero_key)
    user_token_enc_key: bytes = field(default_factory=_zero_key)


@dataclass
class GithubConfig:
    """Source-control integration settings."""
    hook_secret: str = ""
    token: str = ""
    app_id: int = 0
    private_key_pem: bytes = b""
    app_hook_secret: str = ""
    oauth: GithubOAuthConfig = field(default_factory=GithubOAuthConfig)


@dataclass
class SlackConfig:
    """Messaging settings."""
    token: str = ""


@dataclass
class ServerConfig:
    """API server settings. ``disable_tls`` is the only field read by the fetcher."""
    api_keys: List[str] = field(default_factory=list)
    disable_tls: bool = False
    tls_cert: Optional[TLSCertificate] = None


@dataclass
class PGConfig:
    """Database settings."""
    postgres_uri: str = ""
