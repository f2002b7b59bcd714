"""Translate message catalogues while keeping their keys.

`translate_map` sends every value of a catalogue to the provider in one batch and
zips the translated batch back onto the original keys. The provider must return
the batch in the same order: only the length is checked here, a re-ordered batch
would silently bind keys to the wrong translations.

`translate_all` fans `translate_map` out over every language the provider supports.
"""

import asyncio
import errno
import logging
from dataclasses import dataclass
from pathlib import Path

from tqdm import tqdm
from tqdm.contrib.logging import logging_redirect_tqdm

from jsontranslate.catalogue import CATALOGUE_NAME, write_json
from jsontranslate.translators import (
    BatchMismatchError,
    ProviderError,
    TranslatorProtocol,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class TranslationResult:
    """Outcome of translating the catalogue into one language."""

    target: str
    messages: dict[str, str] | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def describe_error(error: Exception) -> str:
    """Render an error as `<code> <message>` for operator diagnostics."""
    if isinstance(error, ProviderError):
        return f"{error.code} {error.message}"
    if isinstance(error, OSError) and error.errno is not None:
        code = errno.errorcode.get(error.errno, error.errno)
        return f"{code} {error.strerror}"
    return f"{type(error).__name__} {error}".rstrip()


async def translate_map(
    messages: dict[str, str],
    target: str,
    translator: TranslatorProtocol,
) -> dict[str, str]:
    """Translate the values of `messages` into `target`, keeping keys and order.

    Args:
        messages: the source catalogue, left untouched.
        target: language code, validated by the provider only.
        translator: provider shared by every language.

    Returns:
        a new dict with the same keys mapped to translated strings.

    Raises:
        ProviderError: if the provider call fails.
        BatchMismatchError: if the provider returns a batch of a different length.
    """
    if not messages:
        return {}

    keys = list(messages)
    values = [messages[key] for key in keys]

    translations = await translator.translate(values, target)
    if len(translations) != len(values):
        raise BatchMismatchError(target, len(values), len(translations))

    return dict(zip(keys, translations))


async def write_artifact(content, outdir: str | Path, name: str) -> Path:
    """Write an artifact without blocking the event loop."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, write_json, content, outdir, name)


async def translate_target(
    messages: dict[str, str],
    target: str,
    translator: TranslatorProtocol,
    outdir: str | Path,
) -> TranslationResult:
    """Translate into one language and write `<outdir>/<target>.json`.

    Never raises for provider or write failures: they are logged and returned as a
    failed result, and nothing is written for a failed translation.
    """
    try:
        translated = await translate_map(messages, target, translator)
    except ProviderError as e:
        log.error(f"Cannot translate to {target}: {describe_error(e)}")
        return TranslationResult(target, error=e)

    try:
        path = await write_artifact(translated, outdir, target)
    except OSError as e:
        log.error(f"Cannot write file: {describe_error(e)}")
        return TranslationResult(target, error=e)

    log.info(f"Translated {len(translated)} messages to '{target}' in '{path}'")
    return TranslationResult(target, messages=translated)


async def translate_all(
    messages: dict[str, str],
    translator: TranslatorProtocol,
    outdir: str | Path,
    concurrency: int = 10,
) -> list[TranslationResult]:
    """Translate the catalogue into every language supported by the provider.

    The language list is saved as `translations.json` before any translation
    starts. Each language then runs as its own task: a failing language is
    reported in its result and never cancels the others.

    Args:
        messages: the source catalogue.
        translator: provider shared by every task.
        outdir: directory receiving the artifacts.
        concurrency: maximum number of languages translated at the same time.

    Returns:
        one result per supported language, in the provider's order.

    Raises:
        ProviderError: if the language list cannot be fetched.
        OSError: if `translations.json` cannot be written.
    """
    languages = await translator.get_languages()
    log.info(f"Provider supports {len(languages)} languages")

    await write_artifact(
        [language.as_dict() for language in languages], outdir, CATALOGUE_NAME
    )

    semaphore = asyncio.Semaphore(concurrency)
    progress_bar = tqdm(total=len(languages), desc="Translating", unit="lang")

    async def _translate_language(code: str) -> TranslationResult:
        async with semaphore:
            result = await translate_target(messages, code, translator, outdir)
        progress_bar.update(1)
        return result

    log.info(f"translating {concurrency} languages at a time.")
    try:
        with logging_redirect_tqdm():
            async with asyncio.TaskGroup() as tg:
                tasks = [
                    tg.create_task(_translate_language(language.code))
                    for language in languages
                ]
    finally:
        progress_bar.close()

    return [task.result() for task in tasks]
