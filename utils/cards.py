"""Card record value type and JSON content helpers."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from PIL import Image

JSONValue = Union[None, bool, int, float, str, list["JSONValue"], dict[str, "JSONValue"]]
CardContent = dict[str, JSONValue]


def is_json_value(value: Any) -> bool:
    """Return True when ``value`` survives a strict JSON encode/decode round trip."""
    if value is None or isinstance(value, (bool, int, str)):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, (list, tuple)):
        return all(is_json_value(item) for item in value)
    if isinstance(value, Mapping):
        return all(isinstance(key, str) and is_json_value(item) for key, item in value.items())
    return False


@dataclass(frozen=True)
class CardRecord:
    """
    A resolved, display-ready card printing.

    Attributes:
        id: Stable identifier of the printing (deduplication key)
        content: Raw card metadata as returned by the card database
        thumbnail: Decoded card image resized for grid display
    """

    id: str
    content: CardContent = field(compare=False)
    thumbnail: Image.Image | None = field(default=None, compare=False, repr=False)

    @property
    def name(self) -> str:
        """Card name from the metadata, or the id when absent."""
        name = self.content.get("name")
        return name if isinstance(name, str) else self.id


__all__ = ["CardContent", "CardRecord", "JSONValue", "is_json_value"]
