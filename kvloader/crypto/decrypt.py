"""
Decryption dispatch for age-encrypted sources.

Two modes exist:

WHOLE_VALUE
    The content is a single age ciphertext, binary or ASCII armored.

INLINE_YAML
    The content is plaintext (typically YAML) in which some scalar values are
    armored age ciphertexts written as block scalars:

        database:
          password: |
            -----BEGIN AGE ENCRYPTED FILE-----
            YWdlLWVuY3J5cHRpb24ub3JnL3YxCi0+IFgyNTUxOSBv...
            -----END AGE ENCRYPTED FILE-----

    Each armored block is decrypted and replaced by its plaintext at the same
    indentation. Nothing else in the document changes; the document is never
    parsed as YAML.

decide_mode() holds the policy choosing between the two.
"""

import logging
import re
from enum import Enum
from typing import Optional, Sequence

import pyrage

from ..constants import Armor, Suffixes
from ..errors import DecryptionFailed

logger = logging.getLogger(__name__)

ARMOR_HEADER = Armor.HEADER.encode("ascii")
ARMOR_FOOTER = Armor.FOOTER.encode("ascii")

_ARMORED_BLOCK = re.compile(
    rb'^(?P<indent>[ \t]*)(?P<block>' + re.escape(ARMOR_HEADER) + rb'(?P<eol>\r?\n)'
    rb'.*?'
    rb'^[ \t]*' + re.escape(ARMOR_FOOTER) + rb')[ \t]*(?=\r?$)',
    re.MULTILINE | re.DOTALL,
)


class DecryptMode(Enum):
    """How an encrypted source is decrypted."""
    WHOLE_VALUE = "whole"
    INLINE_YAML = "inline-yaml"


def is_armored(content: bytes) -> bool:
    """True if content starts with the age armor header."""
    return content.startswith(ARMOR_HEADER)


def decide_mode(name: str, content: Optional[bytes] = None) -> DecryptMode:
    """
    Choose the decryption mode for a source.

    Args:
        name: The key (with .age already removed) or path of the source.
        content: The encrypted content. When given, armored content always
            uses WHOLE_VALUE even for YAML-looking names; when None only the
            name is considered.
    """
    if not name.endswith(Suffixes.YAML):
        return DecryptMode.WHOLE_VALUE
    if content is not None and is_armored(content):
        return DecryptMode.WHOLE_VALUE
    return DecryptMode.INLINE_YAML


def _unindent_block(block: bytes, indent: bytes) -> bytes:
    lines = []
    for line in block.split(b"\n"):
        if line.startswith(indent):
            line = line[len(indent):]
        if line.endswith(b"\r"):
            line = line[:-1]
        lines.append(line)
    return b"\n".join(lines) + b"\n"


def decrypt_value(content: bytes, identities: Sequence[object], source: str = "") -> bytes:
    """
    Decrypt content as one age ciphertext.

    Armored input is handed to pyrage as is, after dropping leading
    whitespace; pyrage enforces the armor format.

    Raises:
        DecryptionFailed: If no identity matches, the ciphertext is corrupt
            or the armor is malformed.
    """
    if not identities:
        raise DecryptionFailed(source, "no identities available")

    stripped = content.lstrip()
    if is_armored(stripped):
        content = stripped

    try:
        return pyrage.decrypt(content, list(identities))
    except pyrage.DecryptError as e:
        raise DecryptionFailed(source, str(e)) from e


def _indent_lines(plaintext: bytes, indent: bytes, newline: bytes = b"\n") -> bytes:
    if plaintext.endswith(b"\n"):
        plaintext = plaintext[:-1]
    lines = plaintext.split(b"\n")
    if newline == b"\r\n":
        lines = [line[:-1] if line.endswith(b"\r") else line for line in lines]
    return newline.join(indent + line if line else line for line in lines)


def decrypt_inline_yaml(content: bytes, identities: Sequence[object], source: str = "") -> bytes:
    """
    Decrypt every armored block inside content in place.

    Documents with CRLF line endings keep them. An armor header that does not
    start a complete block is an error rather than being left encrypted.

    Raises:
        DecryptionFailed: If any block cannot be decrypted or is incomplete.
    """
    count = 0

    def _replace(match) -> bytes:
        nonlocal count
        indent = match.group("indent")
        block = _unindent_block(match.group("block"), indent)
        plaintext = decrypt_value(block, identities, source)
        count += 1
        newline = b"\r\n" if match.group("eol").startswith(b"\r") else b"\n"
        return _indent_lines(plaintext, indent, newline)

    expected = content.count(ARMOR_HEADER)
    result = _ARMORED_BLOCK.sub(_replace, content)
    if count != expected:
        raise DecryptionFailed(
            source, f"{expected - count} armored block(s) not on their own lines or missing a footer"
        )

    logger.debug(f"Decrypted {count} inline blocks in {source or 'value'}")
    return result


def decrypt(
    content: bytes,
    identities: Sequence[object],
    mode: DecryptMode,
    source: str = "",
) -> bytes:
    """Decrypt content using the given mode."""
    logger.debug(f"Decrypting {source or 'value'} ({mode.value})")
    if mode is DecryptMode.INLINE_YAML:
        return decrypt_inline_yaml(content, identities, source)
    return decrypt_value(content, identities, source)
