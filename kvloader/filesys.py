"""
Filesystem content loaders.

A loader turns a path into bytes. FileLoader resolves relative paths against a
root directory and, when restricted, refuses anything that resolves outside of
it. KvLoader takes two loaders: one scoped to the working root for sources and
one scoped to the filesystem root for identity files.
"""

import logging
import os
from pathlib import Path
from typing import Dict, Optional, Union

from .errors import SourceReadFailed

logger = logging.getLogger(__name__)


class FileLoader:
    """Reads files relative to a root directory."""

    def __init__(self, root: Union[str, Path] = ".", restrict_to_root: bool = True):
        self.root = Path(root).resolve()
        self.restrict_to_root = restrict_to_root

    def resolve(self, path: str) -> Path:
        """Return the absolute location of path, enforcing the root restriction."""
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self.root / candidate
        try:
            resolved = candidate.resolve()
        except (OSError, ValueError) as e:
            raise SourceReadFailed(path, str(e)) from e

        if self.restrict_to_root and resolved != self.root and self.root not in resolved.parents:
            raise SourceReadFailed(
                path, f"security; file '{resolved}' is not in or below '{self.root}'"
            )
        return resolved

    def load(self, path: str) -> bytes:
        """Return the content at path."""
        resolved = self.resolve(path)
        try:
            with open(resolved, 'rb') as f:
                content = f.read()
        except OSError as e:
            raise SourceReadFailed(path, e.strerror or str(e)) from e
        except ValueError as e:
            raise SourceReadFailed(path, str(e)) from e

        logger.debug(f"Read {len(content)} bytes from {resolved}")
        return content


class RootLoader(FileLoader):
    """Unrestricted loader anchored at the filesystem root."""

    def __init__(self):
        super().__init__(root=os.path.abspath(os.sep), restrict_to_root=False)


class MemoryLoader:
    """Serves content from a dict; used where sources do not live on disk."""

    def __init__(self, files: Optional[Dict[str, bytes]] = None):
        self.files: Dict[str, bytes] = dict(files or {})

    def load(self, path: str) -> bytes:
        try:
            return self.files[path]
        except KeyError:
            raise SourceReadFailed(path, "no such file") from None
