"""
Core data structures shared by the relay pipeline.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

IdentityKey = Tuple[str, str]


class MediaType(str, Enum):
    VIDEO = "video"
    IMAGE = "image"


def _trimmed_required(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
    return value


class Record(BaseModel):
    """
    A post whose media was successfully re-hosted. Immutable once built.

    Older data files used ``fileditch_link``/``original_link``/``type``; those
    keys are still accepted on load.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    author: str
    relay_url: str = Field(validation_alias=AliasChoices("relay_url", "fileditch_link"))
    original_url: str = Field(validation_alias=AliasChoices("original_url", "original_link"))
    media_type: MediaType = Field(validation_alias=AliasChoices("media_type", "type"))

    @field_validator("title", "author", mode="before")
    @classmethod
    def _trim(cls, value: Any) -> Any:
        return _trimmed_required(value)

    @property
    def identity_key(self) -> IdentityKey:
        return (self.title, self.author)


class CandidatePost(BaseModel):
    """Raw upstream item. Only the three fields the pipeline needs are kept."""

    model_config = ConfigDict(extra="ignore")

    author: str
    title: str
    link: str

    @field_validator("title", "author", mode="before")
    @classmethod
    def _trim(cls, value: Any) -> Any:
        return _trimmed_required(value)

    @field_validator("link")
    @classmethod
    def _non_blank_link(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @property
    def identity_key(self) -> IdentityKey:
        return (self.title, self.author)


@dataclass
class CycleResult:
    success: bool
    new_items_added: int = 0
    total_items_in_file: int = 0
    posts_checked_this_cycle: int = 0
    in_progress: bool = False
    message: str = ""

    @classmethod
    def skipped(cls) -> "CycleResult":
        return cls(success=False, in_progress=True, message="Processing already in progress.")

    @classmethod
    def failed(cls, message: str = "Processing cycle finished with errors (check server logs).") -> "CycleResult":
        return cls(success=False, message=message)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SourceHealth:
    name: str
    healthy: bool
    last_error: Optional[str] = None
    last_success: Optional[datetime] = None
    latency_ms: Optional[float] = None
    status_code: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["last_success"] = self.last_success.isoformat() if self.last_success else None
        return payload
