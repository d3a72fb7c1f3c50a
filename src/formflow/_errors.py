"""Exceptions raised by formflow."""


class ConfigError(Exception):
    """Error in a workflow configuration."""


class RefPathError(ConfigError):
    """A ref-path string is malformed."""


class ResolutionError(Exception):
    """A capability raised while an expression was being resolved."""

    def __init__(self, name: str, cause: Exception) -> None:
        self.name = name
        self.cause = cause
        super().__init__(f"Capability '{name}' failed: {cause}")
