"""Configuration Pydantic models — pure schema, no infrastructure defaults."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class ModelConfig(BaseModel):
    name: str
    repo_id: str
    preprocessor: str
    encoder: str
    encoder_weights: str
    decoder_joint: str
    vocabulary: str
    metadata: str

    @property
    def manifest(self) -> list[str]:
        """Every file that must be present for the model to count as downloaded."""
        return [
            self.preprocessor,
            self.encoder,
            self.encoder_weights,
            self.decoder_joint,
            self.vocabulary,
            self.metadata,
        ]


class DecoderConfig(BaseModel):
    max_symbols_per_step: int = Field(ge=1)
    state_layers: int = Field(ge=1)
    state_hidden: int = Field(ge=1)


class RuntimeConfig(BaseModel):
    intra_threads: int = Field(ge=0)  # 0 → runtime default
    graph_optimization: Literal['disable', 'basic', 'extended', 'all']


class AudioConfig(BaseModel):
    sample_rate: int


class StorageConfig(BaseModel):
    models_dir: str | None = None  # None → platform user data dir


class AppConfig(BaseModel):
    model: ModelConfig
    decoder: DecoderConfig
    runtime: RuntimeConfig
    audio: AudioConfig
    storage: StorageConfig
