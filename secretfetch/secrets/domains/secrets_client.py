"""Single-key secrets client over a pluggable backend store."""
import os
import re
import logging
from typing import Mapping, Optional, Protocol

from .errors import ConfigError, RetrievalError

logger = logging.getLogger(__name__)

MAPPING_PLACEHOLDER = "{id}"

_INVALID_ENV_CHARS = re.compile(r'[^A-Z0-9_]')


class Backend(Protocol):
    """A secret store addressed by mapped location."""

    def fetch(self, location: str) -> bytes:
        ...

    def describe(self, location: str) -> str:
        ...


class EnvVarBackend:
    """Reads secrets from environment variables."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self._environ = environ

    @staticmethod
    def variable_name(location: str) -> str:
        """Upper-case the location and replace anything outside [A-Z0-9_] with '_'."""
        return _INVALID_ENV_CHARS.sub("_", location.upper())

    def describe(self, location: str) -> str:
        return f"${self.variable_name(location)}"

    def fetch(self, location: str) -> bytes:
        environ = os.environ if self._environ is None else self._environ
        name = self.variable_name(location)
        value = environ.get(name)
        if not value:
            raise RetrievalError(f"environment variable {name} is not set")
        return value.encode("utf-8")


class SecretsClient:
    """
    Resolves secret keys through a mapping template and reads them from a backend.

    The mapping is a template containing ``{id}``; for example
    ``secret/production/myapp/{id}`` maps ``db/uri`` to
    ``secret/production/myapp/db/uri``.
    """

    def __init__(self, backend: Backend, mapping: str):
        if not mapping:
            raise ConfigError("secrets mapping is required")
        if MAPPING_PLACEHOLDER not in mapping:
            raise ConfigError(f"secrets mapping must contain {MAPPING_PLACEHOLDER}: {mapping}")
        self.backend = backend
        self.mapping = mapping

    def location(self, key: str) -> str:
        return self.mapping.replace(MAPPING_PLACEHOLDER, key)

    def describe(self, key: str) -> str:
        """Human-readable backend location for a key (never the value)."""
        return self.backend.describe(self.location(key))

    def get(self, key: str) -> bytes:
        """
        Fetch the raw value for a key.

        Raises:
            RetrievalError: If the backend has no value for the key or is unreachable
        """
        return self.backend.fetch(self.location(key))
