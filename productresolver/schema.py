"""
Canonical records produced by the resolution pipeline.

Entities are always fully populated; `to_dict` emits the backend wire
form (`_id`, `discountPrice`, `ratings`, `numReviews`) so that cached
records and synthetic placeholders go through the same normalizer as
live responses.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

DEFAULT_CATEGORY_ID = "inferred-category"
DEFAULT_CATEGORY_NAME = "Furniture"


def slugify(name: str) -> str:
    """Lowercase the name and join its words with hyphens."""
    return "-".join(name.strip().lower().split())


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    slug: str = ""

    def __post_init__(self):
        if not self.slug:
            object.__setattr__(self, "slug", slugify(self.name))

    def to_dict(self) -> Dict[str, str]:
        return {"_id": self.id, "name": self.name, "slug": self.slug}


DEFAULT_CATEGORY = Category(DEFAULT_CATEGORY_ID, DEFAULT_CATEGORY_NAME, "furniture")


@dataclass(frozen=True)
class Specification:
    name: str
    value: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "value": self.value}


@dataclass
class Entity:
    """A resolved product. Every field carries a default."""

    id: str
    name: str = ""
    description: str = ""
    price: float = 0
    discount_price: Optional[float] = None
    stock: float = 0
    images: List[str] = field(default_factory=list)
    category: Category = DEFAULT_CATEGORY
    ratings_average: float = 0
    review_count: float = 0
    specifications: List[Specification] = field(default_factory=list)
    reviews: List[Any] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "_id": self.id,
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "discountPrice": self.discount_price,
            "stock": self.stock,
            "images": list(self.images),
            "category": self.category.to_dict(),
            "ratings": self.ratings_average,
            "numReviews": self.review_count,
            "specifications": [s.to_dict() for s in self.specifications],
            "reviews": list(self.reviews),
        }


@dataclass
class ResolutionAttempt:
    """Diagnostic record of one source attempt. Never part of an Entity."""

    source_label: str
    raw_payload: Any = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.raw_payload is not None


@dataclass
class CacheRecord:
    id: str
    entity: Entity
    cached_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "entity": self.entity.to_dict(),
            "cachedAt": self.cached_at.isoformat(),
        }
