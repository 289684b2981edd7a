"""
kvloader - key-value source loading with age decryption.

Turns literal, file and env-file source declarations into an ordered list of
key/value pairs, decrypting age-encrypted sources on the way.

Usage:
    from kvloader import KvLoader, KvPairSources

    pairs = KvLoader().load(KvPairSources(
        env_sources=["app.env"],
        literal_sources=["LOG_LEVEL=debug"],
        file_sources=["tls.crt=certs/server.crt"],
    ))
"""

from .errors import (
    AmbiguousSeparators,
    ConfigError,
    DecryptionFailed,
    IdentityLoadFailed,
    InvalidEncoding,
    InvalidFileSourceSpec,
    InvalidKeyName,
    InvalidLiteralSource,
    KvLoaderError,
    KvSourceError,
    MissingFilePath,
    MissingKeyName,
    SourceReadFailed,
)
from .filesys import FileLoader, MemoryLoader, RootLoader
from .loader import KvLoader, load
from .types import KvPairSources, Pair
from .validation import KeyValidator

__version__ = "1.0.0"

__all__ = [
    # Loading
    'KvLoader',
    'load',
    'KvPairSources',
    'Pair',
    'KeyValidator',
    'FileLoader',
    'RootLoader',
    'MemoryLoader',

    # Errors
    'KvLoaderError',
    'KvSourceError',
    'InvalidLiteralSource',
    'InvalidFileSourceSpec',
    'MissingKeyName',
    'MissingFilePath',
    'AmbiguousSeparators',
    'InvalidKeyName',
    'InvalidEncoding',
    'IdentityLoadFailed',
    'DecryptionFailed',
    'SourceReadFailed',
    'ConfigError',
]
