"""Local filesystem and identifier collaborators."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path
from typing import BinaryIO
from uuid import uuid4

# Generates a unique name from a prefix, e.g. "remote_" -> "remote_3f2a..."
IdGenerator = Callable[[str], str]


def default_id_generator(prefix: str) -> str:
    return f"{prefix}{uuid4().hex}"


class Filesystem(ABC):
    """Read access to files that are uploaded by path."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Whether a regular file exists at ``path``."""

    @abstractmethod
    def open_read(self, path: str) -> BinaryIO:
        """Open ``path`` for binary reading. Caller closes the handle."""


class LocalFilesystem(Filesystem):
    def exists(self, path: str) -> bool:
        return Path(path).is_file()

    def open_read(self, path: str) -> BinaryIO:
        return open(path, "rb")
