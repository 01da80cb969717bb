"""Immutable input contracts accepted by the graph preparation pipeline."""
from __future__ import annotations

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _FrozenBaseModel(BaseModel):
    """Base model enforcing immutability after creation."""

    model_config = ConfigDict(frozen=True)


class DatasetRecord(_FrozenBaseModel):
    """Domain record carrying a display name and its tags."""

    name: str = Field(..., min_length=1)
    tags: List[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        """Reject names that are only whitespace.

        Args:
            value: The proposed record name.

        Returns:
            str: The stripped record name.

        Raises:
            ValueError: If nothing remains after stripping.
        """
        stripped = value.strip()
        if not stripped:
            raise ValueError("record name must not be blank")
        return stripped

    @field_validator("tags")
    @classmethod
    def _strip_tags(cls, values: List[str]) -> List[str]:
        """Drop blank tags while keeping order and repeats."""

        return [tag.strip() for tag in values if tag and tag.strip()]


class RawNode(_FrozenBaseModel):
    """Node as supplied by an upstream dataset builder."""

    id: str = Field(..., min_length=1)
    label: Optional[str] = None
    attributes: Dict[str, object] = Field(default_factory=dict)


class RawLink(_FrozenBaseModel):
    """Link whose endpoints are node keys or positions in the node list."""

    source: Union[int, str]
    target: Union[int, str]
    id: Optional[str] = Field(default=None, min_length=1)
    attributes: Dict[str, object] = Field(default_factory=dict)


class RawGraph(_FrozenBaseModel):
    """Node-link dataset prior to indexing."""

    nodes: List[RawNode] = Field(default_factory=list)
    links: List[RawLink] = Field(default_factory=list)
