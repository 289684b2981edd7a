"""
Key-value loader.

KvLoader.load() turns a KvPairSources into an ordered list of pairs:

    identities   <- age identity files + probed SSH keys (once)
    env pairs    <- each env-file, whole-file decrypted if it ends in .age
    literal pairs<- each key=value, decrypted if the key ends in .age
    file pairs   <- each [key=]path, decrypted if the path ends in .age

The result is env pairs, then literal pairs, then file pairs, each in input
order. Duplicate keys are passed through untouched. The first failure in any
stage aborts the load and is raised as KvSourceError naming the stage.
"""

import logging
import os
from typing import Callable, List, Optional, Sequence

from .crypto import DecryptMode, decide_mode, decrypt, resolve_identities
from .errors import KvLoaderError, KvSourceError
from .filesys import FileLoader, RootLoader
from .sources import (
    Getenv,
    has_age_suffix,
    key_values_from_lines,
    parse_file_source,
    parse_literal_source,
    strip_age_suffix,
)
from .types import KvPairSources, Pair, decode_content
from .validation import KeyValidator

logger = logging.getLogger(__name__)

IDENTITY_SOURCES = "age identity source files"
ENV_SOURCES = "env source files"
LITERAL_SOURCES = "literal sources"
FILE_SOURCES = "file sources"


class KvLoader:
    """
    Reads, decrypts and validates key-value pairs.

    Args:
        ldr: Loader for env-file and file sources.
        root_ldr: Loader for age identity files, given absolute paths.
        validator: Key name validator.
        getenv: Environment lookup for bare keys in env-files.
        home: Home directory probed for SSH identities.
    """

    def __init__(
        self,
        ldr=None,
        root_ldr=None,
        validator=None,
        getenv: Getenv = os.environ.get,
        home: Optional[str] = None,
    ):
        self.ldr = ldr if ldr is not None else FileLoader()
        self.root_ldr = root_ldr if root_ldr is not None else RootLoader()
        self._validator = validator if validator is not None else KeyValidator()
        self.getenv = getenv
        self.home = home

    @property
    def validator(self):
        return self._validator

    def load(self, sources: KvPairSources) -> List[Pair]:
        """
        Load every source, returning env, literal and file pairs in order.

        Raises:
            KvSourceError: On the first failure, chained to the cause.
        """
        identities = self._stage(
            IDENTITY_SOURCES, sources.age_identity_sources,
            lambda: resolve_identities(sources.age_identity_sources, self.root_ldr, self.home),
        )
        logger.debug(f"Resolved {len(identities)} decryption identities")

        pairs: List[Pair] = []
        pairs.extend(self._stage(
            ENV_SOURCES, sources.env_sources,
            lambda: self.key_values_from_env_files(sources.env_sources, identities),
        ))
        pairs.extend(self._stage(
            LITERAL_SOURCES, sources.literal_sources,
            lambda: self.key_values_from_literal_sources(sources.literal_sources, identities),
        ))
        pairs.extend(self._stage(
            FILE_SOURCES, sources.file_sources,
            lambda: self.key_values_from_file_sources(sources.file_sources, identities),
        ))

        logger.info(f"Loaded {len(pairs)} key-value pairs")
        return pairs

    def _stage(self, category: str, inputs: Sequence[str], run: Callable):
        try:
            return run()
        except KvLoaderError as e:
            logger.debug(f"{category} failed: {type(e).__name__}")
            raise KvSourceError(category, inputs, e) from e

    def key_values_from_env_files(
        self, paths: Sequence[str], identities: Sequence[object]
    ) -> List[Pair]:
        pairs: List[Pair] = []
        for path in paths:
            content = self.ldr.load(path)
            if has_age_suffix(path):
                content = decrypt(content, identities, DecryptMode.WHOLE_VALUE, source=path)
            more = key_values_from_lines(content, self._validator, self.getenv)
            logger.debug(f"Read {len(more)} pairs from env file {path}")
            pairs.extend(more)
        return pairs

    def key_values_from_literal_sources(
        self, sources: Sequence[str], identities: Sequence[object]
    ) -> List[Pair]:
        pairs: List[Pair] = []
        for source in sources:
            key, value = parse_literal_source(source)
            if has_age_suffix(key):
                key = strip_age_suffix(key)
                # Literals never have their content sniffed, only the key
                mode = decide_mode(key)
                value = decode_content(
                    decrypt(value.encode("utf-8", "surrogateescape"), identities, mode, source=key)
                )
            self._validator.is_config_map_key(key)
            pairs.append(Pair(key=key, value=value))
        return pairs

    def key_values_from_file_sources(
        self, sources: Sequence[str], identities: Sequence[object]
    ) -> List[Pair]:
        pairs: List[Pair] = []
        for source in sources:
            key, path = parse_file_source(source)
            content = self.ldr.load(path)
            if has_age_suffix(path):
                key = strip_age_suffix(key)
                mode = decide_mode(key, content)
                content = decrypt(content, identities, mode, source=path)
            self._validator.is_config_map_key(key)
            pairs.append(Pair(key=key, value=decode_content(content)))
        return pairs


def load(sources: KvPairSources, root: str = ".", **kwargs) -> List[Pair]:
    """
    Load sources relative to root with the default loaders and validator.

    An explicit ldr keyword replaces the root-scoped FileLoader; root is then
    unused.
    """
    if "ldr" not in kwargs:
        kwargs["ldr"] = FileLoader(root)
    return KvLoader(**kwargs).load(sources)
