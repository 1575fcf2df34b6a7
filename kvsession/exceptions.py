"""Exceptions."""


class InvalidKeyType(TypeError):
    """A key part is not one of the types the store can order."""


class ConfigurationError(RuntimeError):
    """Raised when a required parameter is missing or malformed."""


class StoreUnavailable(RuntimeError):
    """The key-value engine could not be reached."""
