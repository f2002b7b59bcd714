"""Translator using the Google Cloud Translation v2 REST API."""

import logging
import os
from typing import Literal

import aiohttp

from jsontranslate.translators import (
    LanguageDescriptor,
    ProviderError,
    TranslatorProtocol,
)

log = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://translation.googleapis.com/language/translate/v2"
"""Google Translation v2 endpoint. Supported languages live under `{endpoint}/languages`."""

MAX_SEGMENTS = 128
"""Maximum number of strings accepted by a single v2 translate request."""

FORMATS = Literal["text", "html"]
"""Input formats understood by the v2 API."""


class Translator(TranslatorProtocol):
    """Translator using Google Cloud Translation.

    Must be entered with `async with` so the underlying HTTP session is bound to
    the running event loop. A single instance is shared by every language task.
    """

    def __init__(
        self,
        api_key: str,
        endpoint: str = DEFAULT_ENDPOINT,
        source: str | None = None,
        format: FORMATS = "text",
        timeout: float | None = None,
        max_segments: int = MAX_SEGMENTS,
    ):
        """Initialize the Google Translator.

        Args:
            api_key: Google Cloud Platform API key.
            endpoint: base URL of the v2 translate endpoint.
            source: source language code, `None` lets Google detect it.
            format: whether the strings are plain `text` or `html`.
            timeout: total seconds allowed per request, `None` waits forever.
            max_segments: number of strings sent per request.
        """
        if not api_key:
            raise ValueError("empty API key")

        self.api_key = api_key
        self.endpoint = endpoint.rstrip("/")
        self.source = source
        self.format = format
        self.timeout = timeout
        self.max_segments = max_segments
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "Translator":
        self._session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.timeout)
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    @classmethod
    def get_argparse_args(cls) -> list[tuple[list[str], dict]]:
        """Return argparse argument definitions for the Google translator.

        Returns:
            List of tuples with argument definitions.
        """
        return [
            (
                ["--source"],
                {
                    "type": str,
                    "default": None,
                    "help": "Source language code. Detected by Google when omitted.",
                },
            ),
            (
                ["--format"],
                {
                    "type": str,
                    "default": "text",
                    "choices": ["text", "html"],
                    "help": "Format of the source messages. Default to text.",
                },
            ),
            (
                ["--timeout"],
                {
                    "type": float,
                    "default": None,
                    "help": "Seconds allowed per request. Default to no timeout.",
                },
            ),
            (
                ["--endpoint"],
                {
                    "type": str,
                    "default": os.environ.get("JSON_TRANSLATE_ENDPOINT", DEFAULT_ENDPOINT),
                    "help": f"Translation v2 endpoint. Default to {DEFAULT_ENDPOINT}.",
                },
            ),
        ]

    @classmethod
    def from_args(cls, args, api_key: str) -> "Translator":
        """Create Google translator from parsed arguments.

        Args:
            args: Parsed command-line arguments.
            api_key: API key read from the hidden prompt.

        Returns:
            Configured Google translator instance.

        Raises:
            ValueError: If arguments are invalid.
        """
        if args.timeout is not None and args.timeout <= 0:
            raise ValueError(f"timeout must be greater than 0, got {args.timeout}")

        return cls(
            api_key=api_key,
            endpoint=args.endpoint,
            source=args.source,
            format=args.format,
            timeout=args.timeout,
        )

    async def _request(self, method: str, url: str, **kwargs) -> dict:
        """Send one request and return the decoded JSON body."""
        if self._session is None:
            raise RuntimeError("Translator must be used as `async with Translator(...)`")

        params = {"key": self.api_key, **kwargs.pop("params", {})}
        try:
            async with self._session.request(method, url, params=params, **kwargs) as response:
                try:
                    body = await response.json(content_type=None)
                except ValueError:
                    body = None

                if isinstance(body, dict) and isinstance(body.get("error"), dict):
                    error = body["error"]
                    raise ProviderError(
                        error.get("code", response.status),
                        error.get("message", response.reason or ""),
                    )
                if response.status >= 400:
                    raise ProviderError(response.status, response.reason or "request failed")
                if not isinstance(body, dict):
                    raise ProviderError("INVALID_RESPONSE", "response body is not a JSON object")
                return body
        # aiohttp's timeout errors are also ClientErrors, match them first.
        except TimeoutError as e:
            raise ProviderError("TIMEOUT", f"no response within {self.timeout}s") from e
        except aiohttp.ClientError as e:
            raise ProviderError(type(e).__name__, str(e)) from e

    async def translate(self, values: list[str], target: str) -> list[str]:
        """Translate `values` into `target`.

        Google caps the number of strings per request, so larger batches are sent
        as consecutive requests and the results concatenated in order.
        """
        translations: list[str] = []
        for start in range(0, len(values), self.max_segments):
            batch = values[start : start + self.max_segments]
            payload = {"q": batch, "target": target, "format": self.format}
            if self.source:
                payload["source"] = self.source

            log.debug(f"sending {len(batch)} strings to Google for '{target}'")
            body = await self._request("POST", self.endpoint, json=payload)
            try:
                translations.extend(
                    item["translatedText"] for item in body["data"]["translations"]
                )
            except (KeyError, TypeError) as e:
                raise ProviderError(
                    "INVALID_RESPONSE", f"unexpected translate response, missing {e}"
                ) from e
        return translations

    async def get_languages(self, target: str = "en") -> list[LanguageDescriptor]:
        """List supported languages, with names localized in `target`."""
        body = await self._request(
            "GET", f"{self.endpoint}/languages", params={"target": target}
        )
        try:
            return [
                LanguageDescriptor(code=item["language"], name=item.get("name", item["language"]))
                for item in body["data"]["languages"]
            ]
        except (KeyError, TypeError) as e:
            raise ProviderError(
                "INVALID_RESPONSE", f"unexpected languages response, missing {e}"
            ) from e
