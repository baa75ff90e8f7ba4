"""Backend selection: build the SecretFetcher described by the settings."""
import logging
from typing import List

from ..domains.config_loader import Settings, VaultConfig
from ..domains.errors import ConfigError, SecretsError
from ..domains.gcp_client import GCPBackend
from ..domains.models import AWSCredentials, GithubConfig, PGConfig, ServerConfig, SlackConfig
from ..domains.secrets_client import EnvVarBackend, SecretsClient
from ..domains.vault_client import AppIDAuth, KubernetesAuth, TokenAuth, VaultAuth, VaultBackend
from .fetcher import ClientSecretsFetcher, FileSecretsFetcher, SecretFetcher

logger = logging.getLogger(__name__)

BACKENDS = ("vault", "env", "gcp")


def _read_credential_file(path: str, label: str) -> str:
    try:
        with open(path, 'r') as f:
            return f.read().strip()
    except OSError as e:
        raise ConfigError(f"error reading {label} at {path}: {e}") from e


def _enabled_auth_methods(vault: VaultConfig) -> List[str]:
    """Return the Vault auth methods the config asks for, checking each is complete."""
    methods = []
    if vault.token_auth or vault.token:
        if not vault.token:
            raise ConfigError("Vault token auth requires a token")
        methods.append("token")
    if vault.k8s_auth or vault.k8s_jwt_path or vault.k8s_role:
        if not vault.k8s_jwt_path or not vault.k8s_role:
            raise ConfigError("Vault kubernetes auth requires a JWT path and a role")
        methods.append("kubernetes")
    if vault.app_id or vault.user_id_path:
        if not vault.app_id or not vault.user_id_path:
            raise ConfigError("Vault app-id auth requires both an app id and a user id path")
        methods.append("app-id")
    return methods


def vault_auth_from_config(vault: VaultConfig) -> VaultAuth:
    """
    Pick the single Vault authentication method described by ``vault``.

    Exactly one of token, kubernetes (JWT) or app-id auth must be configured.

    Raises:
        ConfigError: If none or more than one method is configured, or a
            credential file cannot be read
    """
    methods = _enabled_auth_methods(vault)
    if not methods:
        raise ConfigError("no Vault authentication methods were supplied")
    if len(methods) > 1:
        raise ConfigError(f"multiple Vault authentication methods were supplied: {', '.join(methods)}")

    method = methods[0]
    logger.info(f"secrets: using vault {method} auth")
    if method == "token":
        return TokenAuth(token=vault.token)
    if method == "kubernetes":
        jwt = _read_credential_file(vault.k8s_jwt_path, "k8s jwt")
        logger.info(f"secrets: role: {vault.k8s_role}; auth path: {vault.k8s_auth_path}")
        return KubernetesAuth(jwt=jwt, role=vault.k8s_role, mount_point=vault.k8s_auth_path)
    user_id = _read_credential_file(vault.user_id_path, "user id")
    return AppIDAuth(app_id=vault.app_id, user_id=user_id)


def new_secret_fetcher(settings: Settings) -> SecretFetcher:
    """
    Construct the fetcher for the configured backend.

    Agent mode reads files under ``vault.agent_root``; otherwise the named
    backend in ``secrets.backend`` is wrapped in a SecretsClient.

    Raises:
        ConfigError: For an unknown backend, a missing mapping or invalid auth settings
    """
    if settings.vault.use_agent:
        logger.info(f"secrets: using vault agent files under {settings.vault.agent_root}")
        return FileSecretsFetcher(settings.vault.agent_root)

    name = settings.secrets.backend
    if name == "vault":
        if not settings.vault.addr:
            raise ConfigError("Vault address is required")
        backend = VaultBackend(settings.vault.addr, vault_auth_from_config(settings.vault))
    elif name == "env":
        logger.info("secrets: using environment variable backend")
        backend = EnvVarBackend()
    elif name == "gcp":
        if not settings.gcp.project_id:
            raise ConfigError("GCP project ID is required for the gcp backend")
        logger.info(f"secrets: using GCP Secret Manager in project {settings.gcp.project_id}")
        backend = GCPBackend(settings.gcp.project_id, settings.gcp.service_account_path or None)
    else:
        raise ConfigError(f"invalid secrets backend: {name!r} (expected one of: {', '.join(BACKENDS)})")

    client = SecretsClient(backend, settings.secrets.mapping)
    return ClientSecretsFetcher(client)


def populate_database_from_settings(settings: Settings, pg: PGConfig) -> None:
    """Select a fetcher and populate only the database settings."""
    try:
        fetcher = new_secret_fetcher(settings)
    except ConfigError as e:
        raise e.wrap("error creating new secret fetcher") from e
    try:
        fetcher.populate_database(pg)
    except SecretsError as e:
        raise e.wrap("error setting database config") from e


def populate_all_from_settings(
    settings: Settings,
    aws: AWSCredentials,
    gh: GithubConfig,
    slack: SlackConfig,
    srv: ServerConfig,
    pg: PGConfig,
) -> None:
    """Select a fetcher and run the full populate pass."""
    try:
        fetcher = new_secret_fetcher(settings)
    except ConfigError as e:
        raise e.wrap("error creating new secret fetcher") from e
    fetcher.populate_all(aws, gh, slack, srv, pg)
