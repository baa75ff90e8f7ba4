"""Configuration loader for secretfetch."""
import os
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional
import yaml

from .errors import ConfigError
from .identifiers import DEFAULT_AGENT_ROOT
from .preferences import CONFIG_PATH_KEY, get_preference
from .vault_client import DEFAULT_K8S_AUTH_PATH

logger = logging.getLogger(__name__)


def default_config_path() -> Path:
    """Default XDG config location, resolved on each call."""
    return Path.home() / ".config" / "secretfetch" / "config.yml"


@dataclass
class SecretsConfig:
    """Which named backend to use and how keys map onto it."""
    backend: str = ""
    mapping: str = ""


@dataclass
class VaultConfig:
    """Vault agent mode and authentication settings."""
    use_agent: bool = False
    agent_root: str = DEFAULT_AGENT_ROOT
    addr: str = ""
    token_auth: bool = False
    token: str = ""
    k8s_auth: bool = False
    k8s_jwt_path: str = ""
    k8s_role: str = ""
    k8s_auth_path: str = DEFAULT_K8S_AUTH_PATH
    app_id: str = ""
    user_id_path: str = ""


@dataclass
class GCPConfig:
    project_id: str = ""
    service_account_path: str = ""


@dataclass
class Settings:
    """All inputs needed to select a secrets backend."""
    secrets: SecretsConfig = field(default_factory=SecretsConfig)
    vault: VaultConfig = field(default_factory=VaultConfig)
    gcp: GCPConfig = field(default_factory=GCPConfig)
    source: Optional[str] = None


def _get_config_path(explicit_path: Optional[str] = None) -> str:
    """
    Get config file path.

    Priority order:
    1. Explicit path (e.g. ``--config`` on the command line)
    2. User preference (stored in ~/.config/secretfetch/preferences.json)
    3. Default location: ~/.config/secretfetch/config.yml

    Returns:
        Absolute path to config file

    Raises:
        FileNotFoundError: If config file doesn't exist in any location
    """
    if explicit_path:
        path = Path(explicit_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        return str(path)

    config_path_pref = get_preference(CONFIG_PATH_KEY)
    if config_path_pref:
        config_path = Path(config_path_pref)
        if config_path.exists():
            logger.info(f"Using config from preference: {config_path}")
            return str(config_path)
        logger.warning(f"Config path from preference doesn't exist: {config_path}")

    default_config = default_config_path()
    if default_config.exists():
        logger.info(f"Using default config location: {default_config}")
        return str(default_config)

    raise FileNotFoundError(
        "Configuration file not found. Please set up your config file using one of these methods:\n\n"
        "1. Use the default location:\n"
        f"   mkdir -p {default_config.parent}\n"
        f"   cp /path/to/your/config.yml {default_config}\n\n"
        "2. Point to an existing config file:\n"
        "   secretfetch config set-path /path/to/your/config.yml\n\n"
        "3. Pass it explicitly:\n"
        "   secretfetch secrets check --config /path/to/your/config.yml\n"
    )


def _build_section(cls, raw: Any, name: str):
    """Validate one YAML section against a dataclass and instantiate it."""
    if raw is None:
        return cls()
    if not isinstance(raw, dict):
        raise ConfigError(f"'{name}' section must be a mapping, got {type(raw).__name__}")

    known = {f.name: f for f in fields(cls)}
    unknown = set(raw) - set(known)
    if unknown:
        raise ConfigError(f"Unknown keys in '{name}' section: {', '.join(sorted(unknown))}")

    values = {}
    for key, value in raw.items():
        expected = type(known[key].default)
        if value is None:
            continue
        if expected is bool and not isinstance(value, bool):
            raise ConfigError(f"'{name}.{key}' must be true or false")
        if expected is str and not isinstance(value, (str, int)):
            raise ConfigError(f"'{name}.{key}' must be a string")
        values[key] = str(value) if expected is str else value
    return cls(**values)


def _apply_env_overrides(settings: Settings) -> None:
    env = os.environ
    if env.get("SECRETS_BACKEND"):
        settings.secrets.backend = env["SECRETS_BACKEND"]
    if env.get("SECRETS_MAPPING"):
        settings.secrets.mapping = env["SECRETS_MAPPING"]
    if env.get("VAULT_ADDR"):
        settings.vault.addr = env["VAULT_ADDR"]
    if env.get("VAULT_TOKEN"):
        logger.debug("Using Vault token from VAULT_TOKEN environment variable")
        settings.vault.token_auth = True
        settings.vault.token = env["VAULT_TOKEN"]
    if env.get("GCP_PROJECT"):
        logger.debug(f"Using GCP_PROJECT from environment: {env['GCP_PROJECT']}")
        settings.gcp.project_id = env["GCP_PROJECT"]


def parse_config(config: Dict[str, Any], source: Optional[str] = None) -> Settings:
    """
    Build Settings from an already-parsed configuration mapping.

    Raises:
        ConfigError: If a section is malformed
    """
    if not isinstance(config, dict):
        raise ConfigError("Config must be a mapping of sections")

    unknown = set(config) - {"secrets", "vault", "gcp"}
    if unknown:
        raise ConfigError(f"Unknown config sections: {', '.join(sorted(unknown))}")

    settings = Settings(
        secrets=_build_section(SecretsConfig, config.get("secrets"), "secrets"),
        vault=_build_section(VaultConfig, config.get("vault"), "vault"),
        gcp=_build_section(GCPConfig, config.get("gcp"), "gcp"),
        source=source,
    )
    _apply_env_overrides(settings)
    return settings


def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load and validate configuration from YAML file.

    Example file::

        secrets:
          backend: vault
          mapping: secret/production/myapp/{id}
        vault:
          addr: https://vault.internal:8200
          k8s_auth: true
          k8s_jwt_path: /var/run/secrets/kubernetes.io/serviceaccount/token
          k8s_role: myapp

    Args:
        config_path: Optional explicit path; otherwise preference then default location

    Returns:
        Settings with environment overrides applied

    Raises:
        FileNotFoundError: If no config file can be located
        ConfigError: If the file is unreadable, empty or invalid
    """
    path = _get_config_path(config_path)

    try:
        with open(path, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML config at {path}: {e}")
    except OSError as e:
        raise ConfigError(f"Failed to read config file at {path}: {e}")

    if not config:
        raise ConfigError(f"Config file at {path} is empty")

    try:
        settings = parse_config(config, source=path)
    except ConfigError as e:
        raise e.wrap(f"Invalid config at {path}") from e

    logger.info(f"Configuration loaded successfully from {path}")
    logger.debug(f"Using secrets backend: {settings.secrets.backend or '(agent)'}")
    return settings
