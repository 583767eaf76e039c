"""Errors raised while wiring the process together."""


class UtilError(Exception):
    """Base for startup and wiring failures."""


class ConfigurationError(UtilError):
    """Settings that cannot be turned into a working component."""


class DependencyInjectionError(UtilError):
    """No provider implementation matches the requested component."""
