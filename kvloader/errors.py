"""
kvloader Exceptions

Every failure the loader raises derives from KvLoaderError. Parsers and the
decryption dispatcher raise the specific subclasses; KvLoader.load() re-raises
them as KvSourceError with the source category attached and the original
error chained as __cause__.
"""

from typing import Optional, Sequence


class KvLoaderError(Exception):
    """Base exception for all key-value loading errors."""
    pass


class InvalidLiteralSource(KvLoaderError):
    """Raised when a literal source is not of the form key=value."""

    def __init__(self, source: str):
        super().__init__(f"invalid literal source {source}, expected key=value")
        self.source = source


class InvalidFileSourceSpec(KvLoaderError):
    """Raised when a file source is not of the form [key=]path."""
    pass


class MissingKeyName(InvalidFileSourceSpec):
    """Raised when a file source starts with '='."""

    def __init__(self, path: str):
        super().__init__(f"key name for file path {path} missing")
        self.path = path


class MissingFilePath(InvalidFileSourceSpec):
    """Raised when a file source ends with '='."""

    def __init__(self, key: str):
        super().__init__(f"file path for key name {key} missing")
        self.key = key


class AmbiguousSeparators(InvalidFileSourceSpec):
    """Raised when a file source contains more than one '='."""

    def __init__(self, source: str):
        super().__init__("key names or file paths cannot contain '='")
        self.source = source


class InvalidKeyName(KvLoaderError):
    """Raised when a key fails validation."""

    def __init__(self, key: str, reason: str):
        super().__init__(f"invalid key name {key!r}: {reason}")
        self.key = key
        self.reason = reason


class InvalidEncoding(KvLoaderError):
    """Raised when an env-file line is not valid UTF-8."""

    def __init__(self, line: int, reason: str = ""):
        message = f"line {line} has invalid utf8 bytes"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.line = line


class IdentityLoadFailed(KvLoaderError):
    """Raised when an explicitly requested identity file cannot be used."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"failed to load age identity {path}: {reason}")
        self.path = path
        self.reason = reason


class DecryptionFailed(KvLoaderError):
    """Raised when ciphertext cannot be decrypted with the available identities."""

    def __init__(self, source: str, reason: str):
        super().__init__(f"failed to decrypt {source}: {reason}")
        self.source = source
        self.reason = reason


class SourceReadFailed(KvLoaderError):
    """Raised when a loader cannot retrieve a path's content."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"failed to read {path}: {reason}")
        self.path = path
        self.reason = reason


class KvSourceError(KvLoaderError):
    """
    Raised by KvLoader.load() when any source category fails.

    Carries the category name and the full list of inputs for that category;
    the original error is available as __cause__.
    """

    def __init__(
        self,
        category: str,
        sources: Sequence[str],
        cause: Optional[BaseException] = None,
    ):
        message = f"{category}: {list(sources)}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.category = category
        self.sources = tuple(sources)
        self.cause = cause


class ConfigError(KvLoaderError):
    """Raised when a source manifest cannot be read or has the wrong shape."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"invalid source manifest {path}: {reason}")
        self.path = path
        self.reason = reason
