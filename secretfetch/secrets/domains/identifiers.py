"""Registry of logical secret identifiers and their backend keys."""
from enum import Enum

# Root directory where the agent injector materializes secrets as files
DEFAULT_AGENT_ROOT = "/vault/secrets/"


class SecretID(Enum):
    """
    Logical secrets consumed at startup.

    Each member carries the backend key (also the relative file path under the
    agent root) and a short purpose label used in error messages.
    """

    AWS_ACCESS_KEY_ID = ("aws/access_key_id", "AWS access key ID")
    AWS_SECRET_ACCESS_KEY = ("aws/secret_access_key", "AWS secret access key")
    GITHUB_HOOK_SECRET = ("github/hook_secret", "GitHub hook secret")
    GITHUB_TOKEN = ("github/token", "GitHub token")
    GITHUB_APP_ID = ("github/app/id", "GitHub App ID")
    GITHUB_APP_PRIVATE_KEY = ("github/app/private_key", "GitHub App private key")
    GITHUB_APP_HOOK_SECRET = ("github/app/hook_secret", "GitHub App hook secret")
    GITHUB_OAUTH_INSTALLATION_ID = ("github/app/oauth/installation_id", "GitHub App installation id")
    GITHUB_OAUTH_CLIENT_ID = ("github/app/oauth/client/id", "GitHub App client id")
    GITHUB_OAUTH_CLIENT_SECRET = ("github/app/oauth/client/secret", "GitHub App client secret")
    GITHUB_OAUTH_COOKIE_ENC_KEY = ("github/app/oauth/cookie/encryption_key", "GitHub App cookie enc key")
    GITHUB_OAUTH_COOKIE_AUTH_KEY = ("github/app/oauth/cookie/authentication_key", "GitHub App cookie auth key")
    GITHUB_OAUTH_USER_TOKEN_ENC_KEY = ("github/app/oauth/user_token/encryption_key", "GitHub App user token enc key")
    API_KEYS = ("api_keys", "API keys")
    SLACK_TOKEN = ("slack/token", "Slack token")
    TLS_CERT = ("tls/cert", "TLS certificate")
    TLS_KEY = ("tls/key", "TLS key")
    DB_URI = ("db/uri", "DB URI")

    def __init__(self, key: str, purpose: str):
        self.key = key
        self.purpose = purpose

    def __str__(self) -> str:
        return self.key


def lookup(name: str) -> SecretID:
    """
    Resolve a secret identifier by member name or backend key.

    Args:
        name: Either a member name (``DB_URI``, case-insensitive) or a key (``db/uri``)

    Returns:
        The matching SecretID

    Raises:
        KeyError: If nothing in the registry matches
    """
    for secret_id in SecretID:
        if name == secret_id.key or name.upper() == secret_id.name:
            return secret_id
    raise KeyError(f"unknown secret identifier: {name}")
