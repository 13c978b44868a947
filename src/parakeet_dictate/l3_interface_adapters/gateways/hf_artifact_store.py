"""Gateway: Hugging Face Hub artifact store — implements ArtifactStore port."""

from __future__ import annotations

import logging
from pathlib import Path

from huggingface_hub import hf_hub_download

from parakeet_dictate.l1_entities.errors import DownloadError, LoadError

log = logging.getLogger('pkd.hf')


class HfArtifactStore:
    """Keeps one model's files in a local directory, fetching them from an HF repo."""

    def __init__(self, repo_id: str, model_dir: Path) -> None:
        self._repo_id = repo_id
        self._model_dir = model_dir

    @property
    def model_dir(self) -> Path:
        return self._model_dir

    def prepare(self) -> None:
        try:
            self._model_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DownloadError(f'Failed to create model directory {self._model_dir}: {exc}') from exc

    def exists(self, filename: str) -> bool:
        return (self._model_dir / filename).exists()

    def fetch(self, filename: str) -> Path:
        local_path = self._model_dir / filename
        if local_path.exists():
            log.debug('%s already present, skipping', local_path)
            return local_path
        try:
            return Path(hf_hub_download(repo_id=self._repo_id, filename=filename, local_dir=self._model_dir))
        except Exception as exc:
            raise DownloadError(f'Failed to download {self._repo_id}/{filename}: {exc}') from exc

    def read_text(self, filename: str) -> str:
        path = self._model_dir / filename
        try:
            return path.read_text(encoding='utf-8')
        except OSError as exc:
            raise LoadError(f'Failed to read {path}: {exc}') from exc
