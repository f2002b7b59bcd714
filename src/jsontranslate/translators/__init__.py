"""Translators package for sending message catalogues to a translation provider.

This package contains the provider implementations that receive a batch of source
strings and a target language code, and return a parallel batch of translated
strings in the same order.

The module defines a Protocol that each translator implementation must follow so
the fan-out in `jsontranslate.translate` never depends on a concrete provider.
"""
from dataclasses import dataclass
from typing import Protocol


class ProviderError(Exception):
    """Error reported by (or while talking to) the translation provider."""

    def __init__(self, code: int | str, message: str):
        super().__init__(f"{code} {message}")
        self.code = code
        self.message = message


class BatchMismatchError(ProviderError):
    """Provider returned a batch whose length differs from the request."""

    def __init__(self, target: str, expected: int, received: int):
        super().__init__(
            "BATCH_MISMATCH",
            f"sent {expected} strings for '{target}' but received {received}",
        )
        self.target = target
        self.expected = expected
        self.received = received


@dataclass(frozen=True)
class LanguageDescriptor:
    """One language supported by the provider."""

    code: str
    name: str

    def as_dict(self) -> dict[str, str]:
        return {"code": self.code, "name": self.name}


class TranslatorProtocol(Protocol):
    """Protocol for translator implementations."""

    async def translate(self, values: list[str], target: str) -> list[str]:
        """Translate `values` into `target`, keeping positions."""
        ...

    async def get_languages(self) -> list[LanguageDescriptor]:
        """List the languages supported by the provider."""
        ...
