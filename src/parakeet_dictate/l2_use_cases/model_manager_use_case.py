"""Use case: model artifact lifecycle — presence, download, engine build, status."""

from __future__ import annotations

import logging
from collections.abc import Callable

from parakeet_dictate.l1_entities.config import ModelConfig
from parakeet_dictate.l1_entities.errors import DownloadError, LoadError
from parakeet_dictate.l1_entities.model_status import ModelStatus
from parakeet_dictate.l1_entities.vocabulary import parse_vocabulary
from parakeet_dictate.l2_use_cases.ports.artifact_store import ArtifactStore
from parakeet_dictate.l2_use_cases.ports.engine_factory import EngineFactory
from parakeet_dictate.l2_use_cases.stt_session import SttSession
from parakeet_dictate.l2_use_cases.transcribe_use_case import InferencePipeline

log = logging.getLogger('pkd.model')

ProgressSink = Callable[[float], None]


class ModelManager:
    """Downloads the manifest, builds the three engines, and commits status.

    Long work (fetching, parsing, engine construction) runs outside the
    session lock; the session is only touched to publish transitions.
    """

    def __init__(
        self,
        session: SttSession,
        store: ArtifactStore,
        engine_factory: EngineFactory,
        model: ModelConfig,
    ) -> None:
        self._session = session
        self._store = store
        self._factory = engine_factory
        self._model = model

    def status(self) -> ModelStatus:
        return self._session.model_status

    def missing_files(self) -> list[str]:
        return [name for name in self._model.manifest if not self._store.exists(name)]

    def is_downloaded(self) -> bool:
        return not self.missing_files()

    def initialize(self) -> None:
        """Load already-present artifacts at start-up. Failures are recorded in status."""
        if not self.is_downloaded():
            log.info('Model %s not downloaded yet (%s)', self._model.name, self._store.model_dir)
            return
        try:
            self.load()
        except LoadError as exc:
            log.warning('Startup model load failed: %s', exc)

    def download(self, progress_sink: ProgressSink | None = None) -> None:
        """Fetch every manifest file in order, then load.

        Progress is file-granular: ``done / total`` before each file, then
        ``1.0`` once all are present. The first failure aborts, keeps the
        partial directory for a retry, and leaves the status in Error.
        """
        if not self._session.begin_download():
            log.info('Model %s already loaded; download skipped', self._model.name)
            return

        files = self._model.manifest
        total = len(files)
        try:
            self._store.prepare()
            for done, filename in enumerate(files):
                progress = done / total
                if progress_sink is not None:
                    progress_sink(progress)
                self._session.set_progress(progress)
                log.info('Fetching %s (%d/%d)', filename, done + 1, total)
                self._store.fetch(filename)
            if progress_sink is not None:
                progress_sink(1.0)
        except DownloadError as exc:
            log.error('Model download failed: %s', exc)
            self._session.mark_error(str(exc))
            raise
        except Exception as exc:
            log.error('Model download failed: %s', exc, exc_info=True)
            self._session.mark_error(str(exc))
            raise DownloadError(str(exc)) from exc
        except BaseException:
            # Any abort, interrupts included, leaves Error rather than Downloading.
            log.warning('Model download interrupted')
            self._session.mark_error('Download interrupted')
            raise

        self.load()

    def load(self) -> None:
        """Build vocabulary and engines off-lock, then swap them in and mark Ready."""
        try:
            pipeline = self._build()
        except LoadError as exc:
            log.error('Model load failed: %s', exc)
            self._session.mark_error(str(exc))
            raise
        except Exception as exc:
            log.error('Model load failed: %s', exc, exc_info=True)
            self._session.mark_error(str(exc))
            raise LoadError(str(exc)) from exc
        except BaseException:
            log.warning('Model load interrupted')
            self._session.mark_error('Model load interrupted')
            raise

        self._session.apply_pipeline(pipeline)
        log.info(
            'Model %s ready (vocab_size=%d, blank_id=%d)',
            self._model.name,
            pipeline.vocabulary.vocab_size,
            pipeline.vocabulary.blank_id,
        )

    def _build(self) -> InferencePipeline:
        missing = self.missing_files()
        if missing:
            raise LoadError(f'Models not downloaded (missing: {", ".join(missing)})')

        vocabulary = parse_vocabulary(self._store.read_text(self._model.vocabulary).splitlines())
        model_dir = self._store.model_dir
        return InferencePipeline(
            preprocessor=self._factory.create('preprocessor', model_dir / self._model.preprocessor),
            encoder=self._factory.create('encoder', model_dir / self._model.encoder),
            decoder_joint=self._factory.create('decoder_joint', model_dir / self._model.decoder_joint),
            vocabulary=vocabulary,
        )
