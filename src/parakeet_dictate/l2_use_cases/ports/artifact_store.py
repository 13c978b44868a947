"""Port: local model artifact directory with a remote source."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol


class ArtifactStore(Protocol):
    """Abstract model directory — presence checks, fetching, and reads."""

    @property
    def model_dir(self) -> Path: ...

    def prepare(self) -> None:
        """Create the model directory. Raises DownloadError on failure."""
        ...

    def exists(self, filename: str) -> bool:
        """Whether *filename* is present in the model directory."""
        ...

    def fetch(self, filename: str) -> Path:
        """Download *filename* into the model directory. Raises DownloadError."""
        ...

    def read_text(self, filename: str) -> str:
        """Read a text artifact. Raises LoadError if missing or unreadable."""
        ...
