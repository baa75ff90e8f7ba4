"""Error taxonomy for secret population."""


class SecretsError(Exception):
    """Base class for all secretfetch errors."""

    def wrap(self, context: str) -> "SecretsError":
        """
        Return an error of the same kind with context prepended.

        Args:
            context: Message describing the failing operation

        Returns:
            New error whose message reads "<context>: <original message>"
        """
        wrapped = type(self)(f"{context}: {self}")
        wrapped.__cause__ = self
        return wrapped


class ConfigError(SecretsError):
    """Configuration error exception."""
    pass


class RetrievalError(SecretsError):
    """A secret could not be read from its backend."""
    pass


class ValidationError(SecretsError):
    """A secret was retrieved but its content is malformed."""
    pass
