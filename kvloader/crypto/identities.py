"""
Age identity resolution.

Identities come from two places:

- Identity files named explicitly by the caller. These are read through the
  root-scoped loader and any failure is fatal: the caller asked for them.
- The well-known SSH private keys under $HOME/.ssh. These are probed on every
  load and silently skipped when missing or unusable.

Explicit identities always come first in the returned list.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional, Sequence

import pyrage

from ..constants import AGE_SECRET_KEY_PREFIX, COMMENT_PREFIX, SSHKeys
from ..errors import IdentityLoadFailed, KvLoaderError

logger = logging.getLogger(__name__)


def parse_identity_file(content: bytes, path: str = "") -> List[object]:
    """
    Parse an age identity file.

    One identity per line; blank lines and '#' comments are ignored.

    Raises:
        IdentityLoadFailed: On bad encoding, an unparseable line, or a file
            that holds no identities at all.
    """
    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise IdentityLoadFailed(path, "identity file is not valid UTF-8") from e

    identities = []
    for number, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith(COMMENT_PREFIX):
            continue
        if not line.startswith(AGE_SECRET_KEY_PREFIX):
            raise IdentityLoadFailed(path, f"line {number} is not an age secret key")
        try:
            identities.append(pyrage.x25519.Identity.from_str(line))
        except pyrage.IdentityError as e:
            # Never echo the line itself, it is key material
            raise IdentityLoadFailed(path, f"line {number}: {e}") from e

    if not identities:
        raise IdentityLoadFailed(path, "no identities found")
    return identities


def ssh_key_paths(home: Optional[str] = None) -> List[str]:
    """Return the well-known SSH private key locations under home."""
    home = home if home is not None else os.path.expanduser("~")
    return [os.path.join(home, SSHKeys.DIR, name) for name in SSHKeys.NAMES]


def probe_ssh_identity(path: str) -> Optional[object]:
    """
    Try to use an SSH private key as an age identity.

    Returns None when the key is missing, unreadable, passphrase protected or
    of an unsupported type. These keys were not requested by the caller, so
    failures are dropped here rather than reported.
    """
    try:
        content = Path(path).read_bytes()
    except OSError as e:
        logger.debug(f"Skipping SSH identity {path}: {e.strerror or e}")
        return None

    try:
        return pyrage.ssh.Identity.from_buffer(content)
    except Exception as e:
        logger.debug(f"Skipping SSH identity {path}: {type(e).__name__}")
        return None


def resolve_identities(
    explicit_paths: Sequence[str],
    root_loader,
    home: Optional[str] = None,
) -> List[object]:
    """
    Collect decryption identities for a load.

    Args:
        explicit_paths: Age identity files requested by the caller.
        root_loader: Loader used to read the explicit files.
        home: Home directory to probe for SSH keys (defaults to the user's).

    Raises:
        IdentityLoadFailed: If any explicit identity file cannot be used.
    """
    identities: List[object] = []

    for path in explicit_paths:
        absolute = os.path.abspath(path)
        try:
            content = root_loader.load(absolute)
        except KvLoaderError as e:
            raise IdentityLoadFailed(path, str(e)) from e
        parsed = parse_identity_file(content, path)
        logger.debug(f"Loaded {len(parsed)} age identities from {absolute}")
        identities.extend(parsed)

    for path in ssh_key_paths(home):
        identity = probe_ssh_identity(path)
        if identity is None:
            continue
        logger.debug(f"Using SSH identity {path}")
        identities.append(identity)

    return identities
