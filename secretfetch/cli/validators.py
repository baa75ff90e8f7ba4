"""Input validation for CLI arguments."""
import sys

from secretfetch.secrets.domains.identifiers import SecretID, lookup


def validate_secret_id(name: str) -> SecretID:
    """
    Resolve a secret identifier given on the command line.

    Accepts a registry key (``db/uri``) or member name (``DB_URI``).

    Returns:
        The matching SecretID

    Raises:
        SystemExit with code 2 if the identifier is unknown
    """
    if not name:
        print("Error: Secret identifier cannot be empty", file=sys.stderr)
        sys.exit(2)

    try:
        return lookup(name)
    except KeyError:
        print(f"Error: Unknown secret identifier '{name}'", file=sys.stderr)
        print("\nKnown identifiers:", file=sys.stderr)
        for secret_id in SecretID:
            print(f"  {secret_id.key}", file=sys.stderr)
        sys.exit(2)
