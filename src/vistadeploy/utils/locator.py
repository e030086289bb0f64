"""Artifact lookup in the deploy tree"""
from pathlib import Path
from typing import List, Optional, Union

from vistadeploy.core.protocols import FileSystemService

ORDERS = ('newest', 'lexicographic')


class ArtifactLocator:
    """
    Recursive glob search for packaged artifacts.

    When several files match, the winner is chosen explicitly:
        newest         largest mtime; equal mtimes fall back to the
                       lexicographically greatest path
        lexicographic  greatest path string (e.g. highest version suffix
                       for zero-padded versions)
    """

    def __init__(self, filesystem: FileSystemService, order: str = 'newest'):
        if order not in ORDERS:
            raise ValueError(f"Unknown artifact order '{order}', expected one of {ORDERS}")
        self.fs = filesystem
        self.order = order

    def find_all(self, directory: Union[str, Path], pattern: str) -> List[Path]:
        """All matches under directory, best candidate first. Missing dir -> []."""
        if not self.fs.is_dir(directory):
            return []

        matches = [Path(p) for p in self.fs.rglob(directory, pattern)]
        if self.order == 'newest':
            key = lambda p: (self.fs.mtime(p), str(p))
        else:
            key = lambda p: str(p)
        return sorted(matches, key=key, reverse=True)

    def find(self, directory: Union[str, Path], pattern: str) -> Optional[Path]:
        """
        Return the selected match, or None when nothing matches.

        Never raises for an empty or missing directory; the caller decides
        whether "not found" is a failure.
        """
        matches = self.find_all(directory, pattern)
        return matches[0] if matches else None
