"""GCP Secret Manager backend."""
import re
import logging
from typing import Optional
from google.cloud import secretmanager

from .errors import RetrievalError

logger = logging.getLogger(__name__)

# GCP secret names allow only [a-zA-Z0-9_-]
_INVALID_NAME_CHARS = re.compile(r'[^a-zA-Z0-9_-]')


def secret_name_for(location: str) -> str:
    """Map a backend location such as ``acyl/db/uri`` onto a valid GCP secret name."""
    return _INVALID_NAME_CHARS.sub("_", location)


class GCPBackend:
    """Wrapper around GCP Secret Manager client."""

    def __init__(self, project_id: str, service_account_path: Optional[str] = None):
        self.project_id = project_id
        self.service_account_path = service_account_path
        self._client = None

    @property
    def client(self) -> secretmanager.SecretManagerServiceClient:
        """Lazy-initialize client."""
        if self._client is None:
            if self.service_account_path:
                logger.info(f"Using service account: {self.service_account_path}")
                self._client = secretmanager.SecretManagerServiceClient.from_service_account_file(
                    self.service_account_path
                )
            else:
                self._client = secretmanager.SecretManagerServiceClient()
        return self._client

    def describe(self, location: str) -> str:
        """Return the fully-qualified secret version name for a location."""
        return f"projects/{self.project_id}/secrets/{secret_name_for(location)}/versions/latest"

    def fetch(self, location: str) -> bytes:
        """
        Fetch the latest version of a secret.

        Args:
            location: Mapped secret location

        Returns:
            Raw payload bytes

        Raises:
            RetrievalError: If the secret cannot be accessed
        """
        name = self.describe(location)
        try:
            response = self.client.access_secret_version(request={"name": name})
        except Exception as e:
            raise RetrievalError(f"GCP fetch failed for {name}: {e}") from e
        return response.payload.data
