"""HashiCorp Vault backend built on hvac."""
import logging
from dataclasses import dataclass
from typing import Optional, Union

import hvac

from .errors import RetrievalError

logger = logging.getLogger(__name__)

DEFAULT_K8S_AUTH_PATH = "kubernetes"
DEFAULT_VALUE_FIELD = "value"


@dataclass
class TokenAuth:
    """Static Vault token."""
    token: str
    method: str = "token"


@dataclass
class KubernetesAuth:
    """Workload identity: service account JWT exchanged for a Vault token."""
    jwt: str
    role: str
    mount_point: str = DEFAULT_K8S_AUTH_PATH
    method: str = "kubernetes"


@dataclass
class AppIDAuth:
    """Legacy host credential pair (app id + user id)."""
    app_id: str
    user_id: str
    method: str = "app-id"


VaultAuth = Union[TokenAuth, KubernetesAuth, AppIDAuth]


class VaultBackend:
    """
    Reads secrets from Vault paths.

    The hvac client is created and authenticated on first use, so constructing
    a backend never touches the network.
    """

    def __init__(self, addr: str, auth: VaultAuth, value_field: str = DEFAULT_VALUE_FIELD):
        self.addr = addr
        self.auth = auth
        self.value_field = value_field
        self._client: Optional[hvac.Client] = None

    @property
    def client(self) -> hvac.Client:
        """Lazy-initialize and authenticate client."""
        if self._client is None:
            self._client = self._login()
        return self._client

    def _login(self) -> hvac.Client:
        logger.info(f"Authenticating to Vault at {self.addr} using {self.auth.method} auth")
        try:
            if isinstance(self.auth, TokenAuth):
                return hvac.Client(url=self.addr, token=self.auth.token)
            client = hvac.Client(url=self.addr)
            if isinstance(self.auth, KubernetesAuth):
                client.auth.kubernetes.login(
                    role=self.auth.role,
                    jwt=self.auth.jwt,
                    mount_point=self.auth.mount_point,
                )
            else:
                # hvac no longer ships an app-id helper; post to the login endpoint directly
                response = client.adapter.post(
                    "/v1/auth/app-id/login",
                    json={"app_id": self.auth.app_id, "user_id": self.auth.user_id},
                )
                client.token = response["auth"]["client_token"]
            return client
        except Exception as e:
            raise RetrievalError(f"Vault {self.auth.method} authentication failed: {e}") from e

    def describe(self, location: str) -> str:
        return f"{self.addr.rstrip('/')}/v1/{location}#{self.value_field}"

    def fetch(self, location: str) -> bytes:
        """
        Read ``location`` and return its value field.

        Both KV v1 (``data.value``) and KV v2 (``data.data.value``) responses are accepted.

        Raises:
            RetrievalError: If the path cannot be read or has no value field
        """
        try:
            response = self.client.read(location)
        except RetrievalError:
            raise
        except Exception as e:
            raise RetrievalError(f"error reading Vault path {location}: {e}") from e

        if not response or "data" not in response:
            raise RetrievalError(f"secret not found at Vault path {location}")
        data = response["data"]
        if isinstance(data.get("data"), dict):
            data = data["data"]
        if self.value_field not in data:
            raise RetrievalError(f"Vault path {location} has no '{self.value_field}' field")

        value = data[self.value_field]
        if isinstance(value, str):
            return value.encode("utf-8")
        if isinstance(value, (bytes, bytearray)):
            return bytes(value)
        raise RetrievalError(f"Vault path {location} field '{self.value_field}' is not a string")
