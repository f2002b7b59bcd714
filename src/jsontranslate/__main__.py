"""Command line tool to translate a JSON message catalogue with Google Translate.

1. check the input file and the output directory

IN: --infile, --outdir
CHECKS: both exist with the right type, before anything billable happens

2. read the catalogue and ask for the Google Cloud API key (hidden prompt)

IN: JSON object of key -> message
OUT: dict[str, str]

3. translate into one language, or into every supported language with `--target=all`

OUT: <outdir>/<code>.json with the original keys, and <outdir>/translations.json
with the supported languages when translating to all of them.
"""

import argparse
import asyncio
import getpass
import logging
import os
import sys

from dotenv import load_dotenv

from jsontranslate.catalogue import CatalogueError, check_paths, read_messages
from jsontranslate.translate import describe_error, translate_all, translate_target
from jsontranslate.translators import ProviderError
from jsontranslate.translators.google import Translator

log = logging.getLogger(__name__)

EXAMPLE = """
example: jsontranslate --infile=src/en.json --outdir=public/i18n/ --target=all

In this example, the list of the supported languages would be saved in
public/i18n/translations.json (only with --target=all), src/en.json would be
translated in all the supported languages, and the translations would be saved
in public/i18n/<language-code>.json (for example, public/i18n/it.json).
""".strip()

BILLING_NOTICE = """
Please insert your Google Cloud Platform API key for using Google Translate.
The translations will be billed on your account - check with Google for terms and conditions.
""".strip()

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]
"""Accepted values for --log-level and JSON_TRANSLATE_LOG_LEVEL."""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jsontranslate",
        description="Translate a JSON file of messages by using Google Translate.",
        epilog=EXAMPLE,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--infile", help="JSON file with the messages to translate.")
    parser.add_argument("--outdir", help="Existing directory receiving the translations.")
    parser.add_argument("--target", help="Language code, or `all` for every supported language.")
    parser.add_argument(
        "--concurrency",
        type=int,
        default=os.environ.get("JSON_TRANSLATE_CONCURRENCY", "10"),
        help="Languages translated at the same time with --target=all. Default to 10.",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        default=os.environ.get("JSON_TRANSLATE_LOG_LEVEL", "INFO"),
        choices=LOG_LEVELS,
        help="Logging verbosity. Default to INFO.",
    )
    for flags, kwargs in Translator.get_argparse_args():
        parser.add_argument(*flags, **kwargs)
    return parser


def prompt_api_key() -> str:
    """Ask for the API key without echoing it. Never stored anywhere."""
    print(BILLING_NOTICE)
    return getpass.getpass("API key: ")


async def run(
    messages: dict[str, str],
    target: str,
    translator: Translator,
    outdir,
    concurrency: int,
) -> int:
    """Run the requested translations and return the process exit code."""
    async with translator:
        if target != "all":
            result = await translate_target(messages, target, translator, outdir)
            return 0 if result.ok else 1

        try:
            results = await translate_all(messages, translator, outdir, concurrency)
        except ProviderError as e:
            log.error(f"Cannot get supported languages: {describe_error(e)}")
            return 1
        except OSError as e:
            log.error(f"Cannot write file: {describe_error(e)}")
            return 1

    failed = [result.target for result in results if not result.ok]
    if failed:
        log.error(
            f"{len(results) - len(failed)} languages translated, "
            f"{len(failed)} failed: {', '.join(failed)}"
        )
        return 1
    log.info(f"{len(results)} languages translated")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not (args.infile and args.outdir and args.target):
        parser.print_help()
        return 0

    # .env only supplies defaults, so parse again once it is loaded.
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    # argparse does not check `choices` against defaults taken from the environment.
    if args.log_level not in LOG_LEVELS:
        parser.print_usage(sys.stderr)
        print(
            f"ERROR: invalid log level {args.log_level!r}, choose from {', '.join(LOG_LEVELS)}",
            file=sys.stderr,
        )
        return 1
    logging.basicConfig(level=args.log_level, format="%(levelname)s: %(message)s")

    if args.concurrency < 1:
        log.error(f"concurrency must be at least 1, got {args.concurrency}")
        return 1
    if args.timeout is not None and args.timeout <= 0:
        log.error(f"timeout must be greater than 0, got {args.timeout}")
        return 1

    # fail before asking for the key or calling Google: translations are billed.
    try:
        infile, outdir = check_paths(args.infile, args.outdir)
    except CatalogueError as e:
        log.error(str(e))
        return 1

    try:
        messages = read_messages(infile)
    except OSError as e:
        log.error(f"Cannot read file: {describe_error(e)}")
        return 1
    except CatalogueError as e:
        log.error(f"Cannot parse {infile}: {e}")
        return 1

    try:
        api_key = prompt_api_key()
    except (EOFError, KeyboardInterrupt) as e:
        log.error(f"Cannot read prompt: {describe_error(e)}")
        return 1

    try:
        translator = Translator.from_args(args, api_key)
    except ValueError as e:
        log.error(f"Cannot initialize Google Translate: {e}")
        return 1

    return asyncio.run(run(messages, args.target, translator, outdir, args.concurrency))


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
