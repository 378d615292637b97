from __future__ import annotations


class EaselError(Exception):
    pass


class ConfigurationError(EaselError, ValueError):
    """Raised when a setting is rejected; the previous value stays in force."""


class UnknownToolError(ConfigurationError):
    def __init__(self, value: object) -> None:
        super().__init__(f"unknown tool: {value!r}")
        self.value = value
