"""Authentication error types."""


class AuthError(Exception):
    """Base class for authentication and session errors."""


class ConfigurationError(AuthError):
    """Provider credentials or other required settings are missing."""


class AuthenticationError(AuthError):
    """The identity provider callback could not be verified."""


class SessionNotFoundError(AuthError):
    """The session id is unknown or the session has expired."""
