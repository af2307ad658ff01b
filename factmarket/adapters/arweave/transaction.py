from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from factmarket.core.models import Tag


@dataclass
class UnsignedTransaction:
    """A data transaction built locally and handed to a wallet for signing/dispatch."""

    data: str
    tags: List[Tag] = field(default_factory=list)
    id: Optional[str] = None

    def add_tag(self, name: str, value: str) -> None:
        self.tags.append(Tag(name=name, value=value))

    def tag_values(self, name: str) -> List[str]:
        return [t.value for t in self.tags if t.name == name]
