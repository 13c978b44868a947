"""Model lifecycle status entities."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class NotDownloaded(BaseModel):
    type: Literal['NotDownloaded'] = 'NotDownloaded'


class Downloading(BaseModel):
    type: Literal['Downloading'] = 'Downloading'
    progress: float = Field(ge=0.0, le=1.0)


class Ready(BaseModel):
    type: Literal['Ready'] = 'Ready'


class Error(BaseModel):
    type: Literal['Error'] = 'Error'
    message: str


ModelStatus = Annotated[Union[NotDownloaded, Downloading, Ready, Error], Field(discriminator='type')]


class SttStatus(BaseModel):
    """Read-only projection of the session for callers polling status."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, protected_namespaces=())

    model_status: ModelStatus = Field(alias='modelStatus')
    is_recording: bool = Field(alias='isRecording')

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
