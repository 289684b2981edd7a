"""
Pytest configuration and shared fixtures for kvloader tests.

Provides temporary directories, freshly generated age identities, and helpers
for producing binary and armored ciphertext.
"""

import os
import shutil
import sys
import tempfile
from pathlib import Path
from typing import Callable, Generator

import pyrage
import pytest

# Add the parent directory to the path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from kvloader.filesys import FileLoader, RootLoader
from kvloader.loader import KvLoader
from kvloader.validation import KeyValidator


# ===========================================================================
# Temporary Directory Fixtures
# ===========================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that is cleaned up after the test."""
    tmpdir = tempfile.mkdtemp(prefix="kvloader_test_")
    yield Path(tmpdir).resolve()
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def empty_home(temp_dir: Path) -> Path:
    """A home directory without any SSH keys."""
    home = temp_dir / "home"
    home.mkdir()
    return home


@pytest.fixture
def source_dir(temp_dir: Path) -> Path:
    """Directory that sources are read from."""
    src = temp_dir / "src"
    src.mkdir()
    return src


# ===========================================================================
# Age Fixtures
# ===========================================================================

@pytest.fixture
def age_identity():
    """A freshly generated X25519 identity."""
    return pyrage.x25519.Identity.generate()


@pytest.fixture
def other_identity():
    """An identity that cannot decrypt anything encrypted to age_identity."""
    return pyrage.x25519.Identity.generate()


@pytest.fixture
def identity_file(temp_dir: Path, age_identity) -> Path:
    """An age identity file holding age_identity."""
    path = temp_dir / "keys.txt"
    path.write_text(
        "# created: for tests\n"
        f"# public key: {age_identity.to_public()}\n"
        f"{age_identity}\n"
    )
    return path


@pytest.fixture
def encrypt(age_identity) -> Callable[..., bytes]:
    """Encrypt plaintext to age_identity, optionally armored."""
    def _encrypt(plaintext: bytes, armored: bool = False, identity=None) -> bytes:
        recipient = (identity or age_identity).to_public()
        return pyrage.encrypt(plaintext, [recipient], armored=armored)
    return _encrypt


# ===========================================================================
# Loader Fixtures
# ===========================================================================

@pytest.fixture
def validator() -> KeyValidator:
    return KeyValidator()


@pytest.fixture
def fake_env() -> dict:
    """A controlled environment for bare env-file keys."""
    return {"FROM_ENV": "env-value", "EMPTY_VAR": ""}


@pytest.fixture
def kv_loader(source_dir: Path, empty_home: Path, fake_env: dict) -> KvLoader:
    """KvLoader reading from source_dir with no SSH keys and a fake environment."""
    return KvLoader(
        ldr=FileLoader(source_dir),
        root_ldr=RootLoader(),
        validator=KeyValidator(),
        getenv=fake_env.get,
        home=str(empty_home),
    )
