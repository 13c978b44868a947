"""Gateway: audio file decoding through an ffmpeg subprocess."""

from __future__ import annotations

import logging
import shutil
import subprocess  # noqa: S404 -- argument list only, never shell=True
from pathlib import Path

import numpy as np

from parakeet_dictate.l1_entities.audio_constants import SAMPLE_RATE

log = logging.getLogger('pkd.audio')

FFMPEG_TIMEOUT_S = 300
_BYTES_PER_SAMPLE = np.dtype(np.float32).itemsize


def ffmpeg_command(path: Path, sample_rate: int) -> list[str]:
    """ffmpeg invocation that writes raw little-endian float32 mono PCM to stdout."""
    return [
        'ffmpeg',
        '-nostdin',
        '-v',
        'error',
        '-i',
        str(path),
        '-vn',
        '-ac',
        '1',
        '-ar',
        str(sample_rate),
        '-f',
        'f32le',
        'pipe:1',
    ]


def load_audio_file(path: Path, sample_rate: int = SAMPLE_RATE) -> np.ndarray:
    """Decode *path* to a 1-D float32 array at *sample_rate*.

    A file with no audio stream content yields an empty array; transcribing
    that is valid and produces empty text.

    Raises:
        FileNotFoundError: *path* does not exist.
        RuntimeError: ffmpeg is not installed, could not start, timed out or
            rejected the input.
    """
    if not path.is_file():
        raise FileNotFoundError(f'Audio file not found: {path}')
    if shutil.which('ffmpeg') is None:
        raise RuntimeError('ffmpeg is required to read audio files but was not found on PATH')

    try:
        proc = subprocess.run(  # noqa: S603
            ffmpeg_command(path, sample_rate),
            capture_output=True,
            timeout=FFMPEG_TIMEOUT_S,
            check=False,
        )
    except subprocess.TimeoutExpired as exc:
        raise RuntimeError(f'ffmpeg timed out after {FFMPEG_TIMEOUT_S}s decoding {path}') from exc
    except OSError as exc:
        raise RuntimeError(f'Could not start ffmpeg: {exc}') from exc

    if proc.returncode != 0:
        detail = proc.stderr.decode('utf-8', errors='replace').strip()
        raise RuntimeError(f'ffmpeg failed on {path} (exit {proc.returncode}): {detail}')

    usable = len(proc.stdout) - len(proc.stdout) % _BYTES_PER_SAMPLE
    samples = np.frombuffer(proc.stdout[:usable], dtype=np.float32).copy()
    log.info('Decoded %s: %d samples (%.2fs)', path.name, samples.size, samples.size / sample_rate)
    return samples
