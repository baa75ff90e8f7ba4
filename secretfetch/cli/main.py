"""CLI entrypoint for secretfetch."""
import sys
import argparse
import logging
from pathlib import Path

from .validators import validate_secret_id

VERSION = "0.1.0"

# Configure logging to stderr
logging.basicConfig(
    level=logging.WARNING,
    format="%(message)s",
    stream=sys.stderr
)
logger = logging.getLogger(__name__)

DOMAINS = ("aws", "github", "slack", "server", "db")


def cmd_version(args):
    """Show version information."""
    print(f"secretfetch {VERSION}")


def cmd_config_set_path(args):
    """Set config file path preference."""
    from secretfetch.secrets.domains.preferences import CONFIG_PATH_KEY, set_preference

    config_path = Path(args.path).resolve()

    if not config_path.exists():
        print(f"Error: Config file does not exist: {config_path}", file=sys.stderr)
        sys.exit(1)

    if not config_path.is_file():
        print(f"Error: Path is not a file: {config_path}", file=sys.stderr)
        sys.exit(1)

    set_preference(CONFIG_PATH_KEY, str(config_path))
    print(f"Config path set to: {config_path}")


def cmd_config_show(args):
    """Show the current config file path and where it came from."""
    from secretfetch.secrets.domains.config_loader import default_config_path
    from secretfetch.secrets.domains.preferences import CONFIG_PATH_KEY, get_all_preferences

    preferences = get_all_preferences()
    config_path_pref = preferences.get(CONFIG_PATH_KEY)

    if config_path_pref:
        config_path = Path(config_path_pref)
        if config_path.exists():
            print(f"Config path: {config_path}")
        else:
            print(f"Config path (from preference, but file not found): {config_path}")
        print("Source: preference")
    else:
        default_config = default_config_path()
        print(f"Config path: {default_config}")
        print("Source: default" if default_config.exists() else "Source: default (file not found)")


def cmd_config_clear(args):
    """Clear config path preference."""
    from secretfetch.secrets.domains.config_loader import default_config_path
    from secretfetch.secrets.domains.preferences import CONFIG_PATH_KEY, clear_preference

    clear_preference(CONFIG_PATH_KEY)
    print(f"Config path preference cleared. Will use default: {default_config_path()}")


def cmd_secrets_list(args):
    """List the secret identifiers and their backend keys."""
    from secretfetch.secrets.domains.identifiers import SecretID

    width = max(len(secret_id.key) for secret_id in SecretID)
    for secret_id in SecretID:
        print(f"{secret_id.key:<{width}}  {secret_id.purpose}")


def _load_fetcher(args):
    from secretfetch.secrets.domains.config_loader import load_config
    from secretfetch.secrets.workflows.selector import new_secret_fetcher

    settings = load_config(args.config)
    return new_secret_fetcher(settings)


def cmd_secrets_resolve(args):
    """Show where a secret is read from (never its value)."""
    secret_id = validate_secret_id(args.secret_id)
    fetcher = _load_fetcher(args)
    print(f"{secret_id.key} -> {fetcher.describe(secret_id)}")


def cmd_secrets_check(args):
    """Run the populate pass against the configured backend and report per domain."""
    from secretfetch.secrets.domains.errors import SecretsError
    from secretfetch.secrets.domains.models import (
        AWSCredentials, GithubConfig, PGConfig, ServerConfig, SlackConfig,
    )

    fetcher = _load_fetcher(args)
    targets = {
        "aws": (fetcher.populate_cloud_credentials, AWSCredentials()),
        "github": (fetcher.populate_source_control, GithubConfig()),
        "slack": (fetcher.populate_messaging, SlackConfig()),
        "server": (fetcher.populate_server, ServerConfig(disable_tls=args.disable_tls)),
        "db": (fetcher.populate_database, PGConfig()),
    }

    try:
        if args.domain == "all":
            fetcher.populate_all(*(cfg for _, cfg in targets.values()))
        else:
            populate, cfg = targets[args.domain]
            populate(cfg)
    except SecretsError as e:
        print(f"FAILED ({type(e).__name__}): {e}", file=sys.stderr)
        sys.exit(1)

    checked = DOMAINS if args.domain == "all" else (args.domain,)
    for domain in checked:
        print(f"{domain}: ok")
    srv = targets["server"][1]
    if "server" in checked:
        print(f"server: {len(srv.api_keys)} API key(s)")
        if srv.tls_cert is not None:
            print(f"server: TLS certificate {srv.tls_cert.certificate.subject.rfc4514_string()}")


def main():
    """Main CLI entrypoint.

    Exit codes:
        0 - Success
        1 - Runtime errors (configuration, retrieval or validation failures)
        2 - Usage errors (invalid arguments, unknown secret identifier, etc.)
    """
    parser = argparse.ArgumentParser(
        prog="secretfetch",
        description="secretfetch CLI - populate startup configuration from a secrets backend",
        epilog="""
Exit codes:
  0 - Success
  1 - Runtime error (configuration, retrieval or validation failure)
  2 - Usage error (invalid arguments, unknown secret identifier, etc.)

Environment variables:
  SECRETS_BACKEND - backend name (vault, env, gcp), overrides config file
  SECRETS_MAPPING - key mapping template containing {id}
  VAULT_ADDR      - Vault address
  VAULT_TOKEN     - Vault token (enables token auth)
  GCP_PROJECT     - GCP project ID

Configuration:
  Default location: ~/.config/secretfetch/config.yml
  Custom path: Set with 'secretfetch config set-path <path>'
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v for info, -vv for debug)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "version",
        help="Show version information",
        description="Display the current version of secretfetch"
    )

    # config command
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
        description="Manage secretfetch configuration"
    )
    config_subparsers = config_parser.add_subparsers(dest="config_command")

    config_set_path_parser = config_subparsers.add_parser(
        "set-path",
        help="Set config file path",
        description="Store the absolute path to your config file in ~/.config/secretfetch/preferences.json"
    )
    config_set_path_parser.add_argument("path", help="Path to config file")

    config_subparsers.add_parser(
        "show",
        help="Show current config path",
        description="Display the current configuration file path and its source"
    )
    config_subparsers.add_parser(
        "clear",
        help="Clear config path preference",
        description="Remove the config path preference and fall back to the default location"
    )

    # secrets command
    secrets_parser = subparsers.add_parser(
        "secrets",
        help="Secret operations",
        description="Inspect and check the secrets consumed at startup"
    )
    secrets_subparsers = secrets_parser.add_subparsers(dest="secrets_command")

    secrets_subparsers.add_parser(
        "list",
        help="List secret identifiers",
        description="Print every secret identifier with its backend key"
    )

    resolve_parser = secrets_subparsers.add_parser(
        "resolve",
        help="Show where a secret is read from",
        description="Print the backend location (file path, Vault path, variable name) for an identifier"
    )
    resolve_parser.add_argument("secret_id", help="Secret key (e.g. db/uri) or name (e.g. DB_URI)")
    resolve_parser.add_argument("--config", help="Path to config file")

    check_parser = secrets_subparsers.add_parser(
        "check",
        help="Check that all secrets can be populated",
        description="""
Run the startup populate pass against the configured backend.

Values are never printed; only success or the first error is reported.
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    check_parser.add_argument("--config", help="Path to config file")
    check_parser.add_argument(
        "--domain",
        choices=DOMAINS + ("all",),
        default="all",
        help="Check a single config domain (default: all)"
    )
    check_parser.add_argument(
        "--disable-tls",
        action="store_true",
        help="Skip the TLS certificate and key secrets"
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG if args.verbose > 1 else logging.INFO)

    if not args.command:
        parser.print_help()
        sys.exit(2)

    try:
        if args.command == "version":
            cmd_version(args)
        elif args.command == "config":
            if args.config_command == "set-path":
                cmd_config_set_path(args)
            elif args.config_command == "show":
                cmd_config_show(args)
            elif args.config_command == "clear":
                cmd_config_clear(args)
            else:
                config_parser.print_help()
                sys.exit(2)
        elif args.command == "secrets":
            if args.secrets_command == "list":
                cmd_secrets_list(args)
            elif args.secrets_command == "resolve":
                cmd_secrets_resolve(args)
            elif args.secrets_command == "check":
                cmd_secrets_check(args)
            else:
                secrets_parser.print_help()
                sys.exit(2)
        else:
            parser.print_help()
            sys.exit(2)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
