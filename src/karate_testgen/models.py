"""Pydantic models shared across discovery, generation, and publishing."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """One role-tagged message of a completion conversation."""

    role: Literal["system", "user", "assistant"]
    content: str


class CompletionRequest(BaseModel):
    """JSON body sent to the chat completions endpoint."""

    model: str
    temperature: float = Field(ge=0.0, le=2.0)
    messages: list[ChatMessage]


class CompletionMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: str


class CompletionChoice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: CompletionMessage


class CompletionResponse(BaseModel):
    """The subset of a chat completions response the generator relies on."""

    model_config = ConfigDict(extra="ignore")

    choices: list[CompletionChoice] = Field(min_length=1)

    @property
    def text(self) -> str:
        return self.choices[0].message.content


class ControllerArtifact(BaseModel):
    """A controller source file located in the working copy."""

    path: Path
    content: str


class GeneratedFeature(BaseModel):
    """A feature file written for one controller."""

    source: Path
    target: Path


class PipelineResult(BaseModel):
    branch: str
    features: list[GeneratedFeature] = Field(default_factory=list)
