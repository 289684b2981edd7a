"""
Source specification parsers.

Three grammars are handled here:

1. Literal sources: ``key=value``. Only the first '=' splits, so values may
   contain '='. Quote characters are trimmed from both ends of the value.
2. File sources: ``path`` or ``key=path``. Without a key the basename of the
   path becomes the key. Neither part may contain '='.
3. Env-file lines: ``KEY=VALUE`` or a bare ``KEY`` whose value is taken from
   the environment. Blank lines and '#' comments are skipped, leading
   whitespace is ignored and a UTF-8 BOM is dropped from the first line only.

Nothing in this module decrypts; callers check for the .age suffix and hand
content to kvloader.crypto.decrypt.
"""

import logging
import os
import posixpath
from typing import Callable, List, Optional, Tuple

from .constants import COMMENT_PREFIX, SEPARATOR, UTF8_BOM, Suffixes
from .errors import (
    AmbiguousSeparators,
    InvalidEncoding,
    InvalidLiteralSource,
    MissingFilePath,
    MissingKeyName,
)
from .types import Pair

logger = logging.getLogger(__name__)

Getenv = Callable[[str], Optional[str]]

QUOTE_CHARS = "\"'"


def parse_literal_source(source: str) -> Tuple[str, str]:
    """
    Parse a key=value literal into its key and value.

    Differs from a plain split by rejecting an empty key and a missing '='.

    Raises:
        InvalidLiteralSource: If the source has no key or no '='.
    """
    if source.startswith(SEPARATOR):
        raise InvalidLiteralSource(source)

    key, sep, value = source.partition(SEPARATOR)
    if not sep:
        raise InvalidLiteralSource(source)

    return key, value.strip(QUOTE_CHARS)


def parse_file_source(source: str) -> Tuple[str, str]:
    """
    Parse a file source into (key, path).

    Acceptable formats:
        source-path: the basename becomes the key
        key=source-path: key is used as given

    Raises:
        MissingKeyName, MissingFilePath, AmbiguousSeparators
    """
    separators = source.count(SEPARATOR)

    if separators == 0:
        return _basename(source), source
    if separators == 1 and source.startswith(SEPARATOR):
        raise MissingKeyName(source[len(SEPARATOR):])
    if separators == 1 and source.endswith(SEPARATOR):
        raise MissingFilePath(source[:-len(SEPARATOR)])
    if separators > 1:
        raise AmbiguousSeparators(source)

    key, _, path = source.partition(SEPARATOR)
    return key, path


def _basename(path: str) -> str:
    """Last element of a slash-separated path, ignoring trailing slashes."""
    if not path:
        return "."
    stripped = path.rstrip("/")
    if not stripped:
        return "/"
    return posixpath.basename(stripped)


def has_age_suffix(name: str) -> bool:
    return name.endswith(Suffixes.AGE)


def strip_age_suffix(key: str) -> str:
    """Remove a single trailing .age from key."""
    if has_age_suffix(key):
        return key[:-len(Suffixes.AGE)]
    return key


# =============================================================================
# ENV FILES
# =============================================================================

def split_lines(content: bytes) -> List[bytes]:
    """
    Split content on newlines.

    A trailing carriage return is removed from each line and a final newline
    does not produce an extra empty line.
    """
    if not content:
        return []
    lines = content.split(b"\n")
    if lines[-1] == b"":
        lines.pop()
    return [line[:-1] if line.endswith(b"\r") else line for line in lines]


def parse_env_line(
    line: bytes,
    line_index: int,
    validator,
    getenv: Getenv = os.environ.get,
) -> Pair:
    """
    Parse one env-file line.

    Returns a Pair with an empty key for blank and comment lines. A line with
    no '=' takes its value from getenv(key), or "" if unset.

    Raises:
        InvalidEncoding: If the line is not valid UTF-8.
        InvalidKeyName: If the key is not a valid environment variable name.
    """
    try:
        text = line.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidEncoding(line_index, e.reason) from e

    if line_index == 0 and text.startswith(UTF8_BOM):
        text = text[len(UTF8_BOM):]

    text = text.lstrip()

    if not text or text.startswith(COMMENT_PREFIX):
        return Pair()

    key, sep, value = text.partition(SEPARATOR)
    validator.is_env_var_name(key)

    if not sep:
        # No '=' means the value comes from the environment
        value = getenv(key) or ""

    return Pair(key=key, value=value)


def key_values_from_lines(
    content: bytes,
    validator,
    getenv: Getenv = os.environ.get,
) -> List[Pair]:
    """
    Parse env-file content into pairs, skipping blank and comment lines.

    The first failing line aborts the whole file.
    """
    pairs: List[Pair] = []
    for index, line in enumerate(split_lines(content)):
        pair = parse_env_line(line, index, validator, getenv)
        if pair.is_skip:
            continue
        pairs.append(pair)
    return pairs
