"""Issue comment cache models."""

from typing import Literal

from pydantic import BaseModel, Field


class Comment(BaseModel):
    """A single issue comment."""

    id: str
    author: str
    body: str
    created_at: str
    updated_at: str


class CommentsFile(BaseModel):
    """Comment cache keyed by task ID.

    ``fetched_at`` records when each task's comments were last fetched; a task
    present there is skipped by the next non-forced fetch.
    """

    version: Literal["1"] = "1"
    fetched_at: dict[str, str] = Field(default_factory=dict)
    comments: dict[str, list[Comment]] = Field(default_factory=dict)
