"""
Error kinds raised while compiling a testnet configuration.

Every configuration error aborts the whole load. Errors raised by leaf
parsers carry no location; callers re-tag them with the document path
via ConfigurationError.at().
"""


class ScionSimError(Exception):
    """Base class for all simulator errors."""


class ConfigurationError(ScionSimError):
    """A configuration document could not be compiled into a model."""

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def at(self, field: str) -> "ConfigurationError":
        """Return a copy of this error located at ``field``."""
        return type(self)(self.message, field=field)

    def __str__(self) -> str:
        if self.field:
            return f"{self.field}: {self.message}"
        return self.message


class MalformedDocument(ConfigurationError):
    pass


class InvalidIdentifier(ConfigurationError):
    pass


class InvalidInterfaceId(ConfigurationError):
    pass


class InvalidLinkSpec(ConfigurationError):
    pass


class UnknownAsInLink(ConfigurationError):
    pass


class DuplicateAs(ConfigurationError):
    pass


class MissingRequiredAddress(ConfigurationError):
    pass


class InvalidAddress(ConfigurationError):
    pass


class RuntimeStartError(ScionSimError):
    """The runtime could not bind or start one of its listeners."""
