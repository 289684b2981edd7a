"""
Data types shared by the loader stages.
"""

from dataclasses import dataclass, field
from typing import Iterable, Tuple


@dataclass(frozen=True)
class Pair:
    """A single key/value produced from a source."""
    key: str = ""
    value: str = ""

    @property
    def is_skip(self) -> bool:
        """An empty key marks a blank or comment line in an env-file."""
        return not self.key

    def value_bytes(self) -> bytes:
        """Return the value as the exact bytes that were read or decrypted."""
        return self.value.encode("utf-8", "surrogateescape")


def _as_tuple(items: Iterable[str]) -> Tuple[str, ...]:
    return tuple(items or ())


@dataclass(frozen=True)
class KvPairSources:
    """
    The four ordered source lists consumed by KvLoader.load().

    Lists are converted to tuples so a caller's input is never mutated.
    """
    env_sources: Tuple[str, ...] = field(default_factory=tuple)
    literal_sources: Tuple[str, ...] = field(default_factory=tuple)
    file_sources: Tuple[str, ...] = field(default_factory=tuple)
    age_identity_sources: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "env_sources", _as_tuple(self.env_sources))
        object.__setattr__(self, "literal_sources", _as_tuple(self.literal_sources))
        object.__setattr__(self, "file_sources", _as_tuple(self.file_sources))
        object.__setattr__(
            self, "age_identity_sources", _as_tuple(self.age_identity_sources)
        )

    def merged(self, other: "KvPairSources") -> "KvPairSources":
        """Return a new instance with other's entries appended to each list."""
        return KvPairSources(
            env_sources=self.env_sources + other.env_sources,
            literal_sources=self.literal_sources + other.literal_sources,
            file_sources=self.file_sources + other.file_sources,
            age_identity_sources=self.age_identity_sources + other.age_identity_sources,
        )


def decode_content(content: bytes) -> str:
    """Turn raw content into a str without losing non-UTF-8 bytes."""
    return content.decode("utf-8", "surrogateescape")
