"""
Option Models
=============

Pydantic models for the two option bags the library accepts:

  - WrapperOptions: ``init()`` options (client, queue, logging, defaults)
  - FireOptions: per-call ``fire()`` options (parallel flag, custom id)

Both accept the camelCase spellings (``queueLogs``,
``defaultParallelStatus``) as aliases.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class WrapperOptions(BaseModel):
    """Options recognised by ``ServiceWrapper.init``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    client: Callable[..., Any] | None = None
    queue: bool = False
    queue_logs: bool = Field(default=False, alias="queueLogs")
    default_parallel_status: bool | None = Field(
        default=None, alias="defaultParallelStatus"
    )


class FireOptions(BaseModel):
    """
    Options for a single ``ClientHandler.fire`` call.

    Extra keys are kept so callers can hand metadata to their hooks; every
    hook that receives fire options gets this model.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    parallel: bool | None = None
    id: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, value: Any) -> str | None:
        # Queue ids are strings; any other key is used by its str() form.
        if value is None or isinstance(value, str):
            return value
        return str(value)

    def with_default_parallel(self, default: bool) -> FireOptions:
        """Return a copy with ``parallel`` filled in when unset."""
        if self.parallel is not None:
            return self
        return self.model_copy(update={"parallel": default})
