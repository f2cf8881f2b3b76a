from dataclasses import dataclass, field
from math import ceil
from typing import Any, Callable


@dataclass
class Page:
    """One slice of a sorted listing. `page` is zero-based."""
    content: list = field(default_factory=list)
    page: int = 0
    size: int = 20
    total_elements: int = 0

    @property
    def total_pages(self) -> int:
        return ceil(self.total_elements / self.size) if self.size else 0

    def map(self, fn: Callable[[Any], Any]) -> "Page":
        return Page([fn(x) for x in self.content], self.page, self.size, self.total_elements)

    def to_dict(self) -> dict:
        return {
            "content": list(self.content),
            "page": self.page,
            "size": self.size,
            "total_elements": self.total_elements,
            "total_pages": self.total_pages,
        }
