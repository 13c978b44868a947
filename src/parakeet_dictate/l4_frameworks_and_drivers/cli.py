"""CLI entry point for parakeet-dictate."""

from __future__ import annotations

import logging
import sys
import threading
from pathlib import Path

import click

from parakeet_dictate import __version__
from parakeet_dictate.l1_entities.errors import SttError
from parakeet_dictate.l2_use_cases.ports.audio_source import AudioSource

log = logging.getLogger('pkd.cli')


def _fail(message: str) -> None:
    click.echo(f'Error: {message}', err=True)
    sys.exit(1)


def _build_container(ctx: click.Context):
    """Load config and wire the container on first use (not on --help)."""
    if 'container' in ctx.obj:
        return ctx.obj['container']

    from parakeet_dictate.l4_frameworks_and_drivers.container import (  # noqa: PLC0415 -- deferred: runtime stack not loaded on --help
        DependencyContainer,
    )
    from parakeet_dictate.l4_frameworks_and_drivers.infra_config import (  # noqa: PLC0415 -- deferred: not needed for --help
        build_app_config,
    )

    overrides: dict = {}
    if ctx.obj.get('models_dir'):
        overrides['storage'] = {'models_dir': ctx.obj['models_dir']}
    try:
        raw = DependencyContainer.config_loader().load_raw(ctx.obj.get('config_path'), overrides=overrides or None)
        config = build_app_config(raw)
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))

    container = DependencyContainer(config)
    ctx.obj['container'] = container
    ctx.call_on_close(container.controller.close)
    return container


@click.group()
@click.option(
    '-c',
    '--config',
    'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help='Path to YAML config file.',
)
@click.option(
    '--models-dir',
    default=None,
    type=click.Path(file_okay=False),
    help='Directory holding downloaded models (default: user data dir).',
)
@click.option('-v', '--verbose', is_flag=True, help='Log progress and decoder details to stderr.')
@click.option(
    '--log-file',
    default=None,
    type=click.Path(dir_okay=False),
    help='Also write debug logs to this file.',
)
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx, config_path, models_dir, verbose, log_file):
    """parakeet-dictate -- offline speech-to-text with a Parakeet TDT model."""
    from parakeet_dictate.l4_frameworks_and_drivers.logging_setup import (  # noqa: PLC0415 -- deferred: not needed for --help
        setup_logging,
    )

    setup_logging(verbose=verbose, log_file=Path(log_file) if log_file else None)
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config_path
    ctx.obj['models_dir'] = models_dir


@cli.command()
@click.pass_context
def status(ctx):
    """Print model and recording status as JSON."""
    container = _build_container(ctx)
    container.model_manager.initialize()
    click.echo(container.controller.get_status().to_json())


@cli.command()
@click.pass_context
def download(ctx):
    """Download the model files and load them."""
    container = _build_container(ctx)
    name = container.config.model.name

    def _on_progress(progress: float) -> None:
        click.echo(f'Downloading {name}: {int(progress * 100)}%', err=True)

    container.model_manager.initialize()
    try:
        container.controller.download_model(_on_progress)
    except SttError as e:
        _fail(str(e))
    click.echo(f'Model ready: {container.model_dir}', err=True)


@cli.command()
@click.argument('audio_file', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def transcribe(ctx, audio_file):
    """Transcribe AUDIO_FILE (any format ffmpeg reads) and print the text."""
    from parakeet_dictate.l3_interface_adapters.gateways.audio_file_loader import (  # noqa: PLC0415 -- deferred: file mode only
        load_audio_file,
    )

    container = _build_container(ctx)
    container.model_manager.initialize()
    try:
        audio = load_audio_file(Path(audio_file), sample_rate=container.config.audio.sample_rate)
    except (FileNotFoundError, RuntimeError) as e:
        _fail(str(e))

    controller = container.controller
    try:
        controller.start_recording()
        controller.push_audio(audio)
        text = controller.stop_and_transcribe()
    except SttError as e:
        _fail(str(e))
    click.echo(text)


@cli.command()
@click.pass_context
def record(ctx):
    """Record from the default microphone until Enter, then print the text."""
    from parakeet_dictate.l3_interface_adapters.gateways.sounddevice_audio_source import (  # noqa: PLC0415 -- deferred: PortAudio only loaded for mic capture
        SounddeviceAudioSource,
    )

    container = _build_container(ctx)
    container.model_manager.initialize()
    controller = container.controller
    try:
        controller.start_recording()
    except SttError as e:
        _fail(str(e))

    source: AudioSource = SounddeviceAudioSource()
    try:
        source.open(sample_rate=container.config.audio.sample_rate, channels=1)
    except Exception as e:
        controller.cancel_recording()
        _fail(f'Cannot open microphone ({e}).')

    stop = threading.Event()
    pump_errors: list[Exception] = []

    def _pump() -> None:
        try:
            while not stop.is_set():
                chunk = source.read(timeout=0.1)
                if chunk is not None:
                    controller.push_audio(chunk)
        except Exception as exc:
            log.error('Microphone capture failed', exc_info=True)
            pump_errors.append(exc)
            click.echo('Microphone capture failed; press Enter.', err=True)

    pump = threading.Thread(target=_pump, name='pkd-mic', daemon=True)
    pump.start()
    click.echo('Recording... press Enter to stop.', err=True)
    try:
        sys.stdin.readline()
    finally:
        stop.set()
        pump.join()
        source.close()

    if pump_errors:
        controller.cancel_recording()
        _fail(f'Microphone capture failed ({pump_errors[0]}).')

    try:
        tail = source.drain()
        if tail is not None:
            controller.push_audio(tail)
        text = controller.stop_and_transcribe()
    except SttError as e:
        _fail(str(e))
    click.echo(text)
