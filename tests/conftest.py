from __future__ import annotations

from jsontranslate.translators import LanguageDescriptor, ProviderError


class StubTranslator:
    """In-memory provider: `dictionary[target][source] -> translation`."""

    def __init__(
        self,
        dictionary: dict[str, dict[str, str]] | None = None,
        languages: list[LanguageDescriptor] | None = None,
        failing: set[str] | None = None,
    ) -> None:
        self.dictionary = dictionary or {}
        self.languages = languages or []
        self.failing = failing or set()
        self.translate_calls: list[tuple[list[str], str]] = []
        self.language_calls = 0
        self.entered = False

    async def __aenter__(self) -> StubTranslator:
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        return False

    async def translate(self, values: list[str], target: str) -> list[str]:
        self.translate_calls.append((list(values), target))
        if target in self.failing:
            raise ProviderError(400, f"Invalid target language: {target}")
        words = self.dictionary.get(target, {})
        result = [words.get(value, f"{value} [{target}]") for value in values]
        assert len(result) == len(values)
        return result

    async def get_languages(self) -> list[LanguageDescriptor]:
        self.language_calls += 1
        return list(self.languages)


class ShortBatchTranslator(StubTranslator):
    """Drops the last translation of every batch."""

    async def translate(self, values: list[str], target: str) -> list[str]:
        result = await super().translate(values, target)
        return result[:-1]
