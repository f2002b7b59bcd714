"""Read message catalogues and write translated artifacts.

IN: a JSON object mapping message keys to strings
OUT: `<outdir>/<name>.json` files (one per language, plus `translations.json`)
CHECKS: paths exist and have the right type, every value is a string
"""

import json
import logging
from pathlib import Path

from jsonschema import Draft202012Validator

log = logging.getLogger(__name__)

CATALOGUE_NAME = "translations"
"""Artifact name for the list of supported languages."""

MESSAGES_SCHEMA = {
    "type": "object",
    "patternProperties": {"^.*$": {"type": "string"}},
    "additionalProperties": False,
}
"""JSON schema of an input catalogue: a flat object whose values are all strings."""


class CatalogueError(ValueError):
    """Input file or path does not hold a usable message catalogue."""


def check_paths(infile: str | Path, outdir: str | Path) -> tuple[Path, Path]:
    """Ensure the input file and output directory exist before doing anything billable.

    Raises:
        CatalogueError: naming the offending path.
    """
    infile, outdir = Path(infile), Path(outdir)

    if not outdir.exists():
        raise CatalogueError(f"output directory does not exist: {outdir}")
    if not infile.exists():
        raise CatalogueError(f"input file does not exist: {infile}")
    if not outdir.is_dir():
        raise CatalogueError(f"output directory is not a directory: {outdir}")
    if not infile.is_file():
        raise CatalogueError(f"input file is not a file: {infile}")

    return infile, outdir


def parse_messages(text: str) -> dict[str, str]:
    """Parse a flat JSON object of string messages.

    Raises:
        CatalogueError: if the text is not a JSON object of strings.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise CatalogueError(f"invalid JSON: {e}") from e

    errors = list(Draft202012Validator(MESSAGES_SCHEMA).iter_errors(data))
    if not errors:
        return data

    if any(not error.path for error in errors):
        raise CatalogueError(f"expected a JSON object, got {type(data).__name__}")

    invalid = {str(error.path[0]) for error in errors}
    raise CatalogueError(
        "values must be strings, nested or non-string values under: "
        + ", ".join(key for key in data if key in invalid)
    )


def read_messages(path: str | Path) -> dict[str, str]:
    """Read the message catalogue at `path`.

    Raises:
        OSError: if the file cannot be read.
        CatalogueError: if its content is not a flat JSON object of strings.
    """
    log.debug(f"Reading messages from '{path}'")
    text = Path(path).read_text(encoding="utf-8")
    messages = parse_messages(text)
    log.info(f"Found {len(messages)} messages in '{path}'")
    return messages


def write_json(content, outdir: str | Path, name: str) -> Path:
    """Write `content` as compact UTF-8 JSON to `<outdir>/<name>.json`, overwriting."""
    path = Path(outdir) / f"{name}.json"
    with open(path, "w", encoding="utf-8") as f:
        json.dump(content, f, ensure_ascii=False, separators=(",", ":"))
    log.debug(f"Wrote '{path}'")
    return path
