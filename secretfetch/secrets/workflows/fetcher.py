"""Secret fetchers: populate configuration objects from a secrets backend."""
import os
import logging
from abc import ABC, abstractmethod
from typing import Optional, Protocol

from ..domains.errors import RetrievalError, SecretsError
from ..domains.identifiers import DEFAULT_AGENT_ROOT, SecretID
from ..domains.models import AWSCredentials, GithubConfig, PGConfig, ServerConfig, SlackConfig
from ..domains.validation import load_tls_pair, parse_positive_int, require_key_length, split_api_keys

logger = logging.getLogger(__name__)


class SecretFetcher(ABC):
    """
    Retrieves secrets and writes them into configuration objects.

    Subclasses implement :meth:`get` for a single secret; every populate
    operation is built on top of it. Populate calls write fields in order and
    stop at the first error, leaving fields written so far in place.
    """

    @abstractmethod
    def get(self, secret_id: SecretID) -> bytes:
        """
        Retrieve the raw value of one secret.

        Raises:
            RetrievalError: If the secret cannot be read
        """

    def describe(self, secret_id: SecretID) -> str:
        """Where ``secret_id`` is read from, for diagnostics."""
        return secret_id.key

    def _get(self, secret_id: SecretID) -> bytes:
        logger.debug(f"Fetching secret {secret_id.key}")
        try:
            return self.get(secret_id)
        except RetrievalError as e:
            raise e.wrap(f"error getting {secret_id.purpose}") from e

    def _get_text(self, secret_id: SecretID) -> str:
        # undecodable bytes survive as surrogates; encode with surrogateescape to recover them
        return self._get(secret_id).decode("utf-8", "surrogateescape")

    def populate_all(
        self,
        aws: AWSCredentials,
        gh: GithubConfig,
        slack: SlackConfig,
        srv: ServerConfig,
        pg: PGConfig,
    ) -> None:
        """
        Populate all secrets into the respective config objects.

        Raises:
            SecretsError: The first failure, wrapped with the failing domain
        """
        steps = (
            ("AWS", self.populate_cloud_credentials, aws),
            ("GitHub", self.populate_source_control, gh),
            ("Slack", self.populate_messaging, slack),
            ("server", self.populate_server, srv),
            ("db", self.populate_database, pg),
        )
        for domain, populate, cfg in steps:
            try:
                populate(cfg)
            except SecretsError as e:
                raise e.wrap(f"error getting {domain} secrets") from e
        logger.info("All secrets populated")

    def populate_database(self, pg: PGConfig) -> None:
        pg.postgres_uri = self._get_text(SecretID.DB_URI)

    def populate_cloud_credentials(self, aws: AWSCredentials) -> None:
        aws.access_key_id = self._get_text(SecretID.AWS_ACCESS_KEY_ID)
        aws.secret_access_key = self._get_text(SecretID.AWS_SECRET_ACCESS_KEY)

    def populate_source_control(self, gh: GithubConfig) -> None:
        """Populate GitHub token, App and App OAuth secrets, validating ids and key sizes."""
        gh.hook_secret = self._get_text(SecretID.GITHUB_HOOK_SECRET)
        gh.token = self._get_text(SecretID.GITHUB_TOKEN)

        # GitHub App
        raw = self._get(SecretID.GITHUB_APP_ID)
        gh.app_id = parse_positive_int(raw, "app ID")
        gh.private_key_pem = self._get(SecretID.GITHUB_APP_PRIVATE_KEY)
        gh.app_hook_secret = self._get_text(SecretID.GITHUB_APP_HOOK_SECRET)

        # GitHub App OAuth
        raw = self._get(SecretID.GITHUB_OAUTH_INSTALLATION_ID)
        gh.oauth.app_installation_id = parse_positive_int(raw, "installation id")
        gh.oauth.client_id = self._get_text(SecretID.GITHUB_OAUTH_CLIENT_ID)
        gh.oauth.client_secret = self._get_text(SecretID.GITHUB_OAUTH_CLIENT_SECRET)
        raw = self._get(SecretID.GITHUB_OAUTH_COOKIE_AUTH_KEY)
        gh.oauth.cookie_auth_key = require_key_length(raw, "cookie auth key")
        raw = self._get(SecretID.GITHUB_OAUTH_COOKIE_ENC_KEY)
        gh.oauth.cookie_enc_key = require_key_length(raw, "cookie enc key")
        raw = self._get(SecretID.GITHUB_OAUTH_USER_TOKEN_ENC_KEY)
        gh.oauth.user_token_enc_key = require_key_length(raw, "user token enc key")

    def populate_messaging(self, slack: SlackConfig) -> None:
        slack.token = self._get_text(SecretID.SLACK_TOKEN)

    def populate_server(self, srv: ServerConfig) -> None:
        """Populate API keys and, unless TLS is disabled, the TLS certificate pair."""
        srv.api_keys = split_api_keys(self._get(SecretID.API_KEYS))
        if srv.disable_tls:
            logger.debug("TLS disabled, skipping certificate secrets")
            return
        cert_pem = self._get(SecretID.TLS_CERT)
        key_pem = self._get(SecretID.TLS_KEY)
        srv.tls_cert = load_tls_pair(cert_pem, key_pem)


class FileReader(Protocol):
    def read_file(self, path: str) -> bytes:
        ...


class LocalFileReader:
    """Reads files from the local filesystem."""

    def read_file(self, path: str) -> bytes:
        with open(path, 'rb') as f:
            return f.read()


class FileSecretsFetcher(SecretFetcher):
    """
    Reads secrets materialized as files by an agent process.

    Each secret lives at ``<root>/<key>``; files are re-read on every call.
    """

    def __init__(self, root: str = DEFAULT_AGENT_ROOT, reader: Optional[FileReader] = None):
        self.root = root
        self.reader = reader or LocalFileReader()

    def path_for(self, secret_id: SecretID) -> str:
        return os.path.join(self.root, secret_id.key)

    def get(self, secret_id: SecretID) -> bytes:
        path = self.path_for(secret_id)
        try:
            return self.reader.read_file(path)
        except RetrievalError:
            raise
        except Exception as e:
            raise RetrievalError(f"error reading {path}: {e}") from e

    def describe(self, secret_id: SecretID) -> str:
        return self.path_for(secret_id)


class ClientSecretsFetcher(SecretFetcher):
    """Delegates each lookup to a configured secrets client's ``get(key)``."""

    def __init__(self, client):
        self.client = client

    def get(self, secret_id: SecretID) -> bytes:
        try:
            return self.client.get(secret_id.key)
        except RetrievalError:
            raise
        except Exception as e:
            raise RetrievalError(f"secrets client error for {secret_id.key}: {e}") from e

    def describe(self, secret_id: SecretID) -> str:
        return self.client.describe(secret_id.key)
