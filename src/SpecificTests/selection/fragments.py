"""Turn the raw ``--tests`` argument into name fragments."""
from __future__ import annotations

import logging
from pathlib import Path

from SpecificTests.pipeline.errors import ConfigurationError
from SpecificTests.shared.config import SelectionConfig

logger = logging.getLogger(__name__)

FRAGMENTS_REQUIRED = (
    "The --tests argument requires one or more specific test names or "
    "their substrings. Examples: --tests TestMethod1, "
    "--tests TestMethod1,method2."
)


def tokenize(text: str, delimiter: str = ",", escape: str = "\\") -> list[str]:
    """Split ``text`` on ``delimiter``.

    The escape character makes the character after it literal, so an
    escaped delimiter stays inside the token. A trailing lone escape is
    dropped.
    """
    tokens: list[str] = []
    buffer: list[str] = []
    escaping = False
    for char in text:
        if escaping:
            buffer.append(char)
            escaping = False
        elif char == escape:
            escaping = True
        elif char == delimiter:
            tokens.append("".join(buffer))
            buffer = []
        else:
            buffer.append(char)
    tokens.append("".join(buffer))
    return tokens


def _read_list_file(path: str) -> str:
    # utf-8-sig drops a leading byte-order mark.
    try:
        content = Path(path).read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(
            f"Unable to read test names from {path}: {exc}"
        ) from exc
    logger.info("Read specified cases from %s successfully", path)
    return content


def parse_fragments(
    argument: str | None,
    config: SelectionConfig | None = None,
) -> list[str]:
    """Return the ordered, trimmed, non-blank fragments of ``argument``.

    An argument ending with the list-file suffix is read as a file whose
    contents are parsed instead. Raises ConfigurationError when no
    fragment remains.
    """
    config = config or SelectionConfig()
    fragments: list[str] = []

    if argument is not None and argument.strip():
        if argument.endswith(config.list_file_suffix):
            argument = _read_list_file(argument)
        fragments = [
            token.strip()
            for token in tokenize(
                argument, config.split_delimiter, config.escape_delimiter
            )
            if token.strip()
        ]

    if not fragments:
        raise ConfigurationError(FRAGMENTS_REQUIRED)
    return fragments
