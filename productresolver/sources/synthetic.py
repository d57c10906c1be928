"""Deterministic placeholder products built from nothing but the requested id."""

import re
from typing import Any
from urllib.parse import quote_plus

from ..categories import infer_from_text
from ..schema import DEFAULT_CATEGORY, Category, Entity, Specification
from .base import SourceAdapter

OBJECT_ID_PATTERN = re.compile(r"^[0-9a-f]{24}$", re.IGNORECASE)

PLACEHOLDER_IMAGE = "https://placehold.co/800x600/orange/white?text={text}"
FALLBACK_PRICE = 19999
FALLBACK_DISCOUNT_PRICE = 15999
FALLBACK_STOCK = 10
FALLBACK_RATING = 4.5
FALLBACK_REVIEW_COUNT = 12
FALLBACK_SPECIFICATIONS = (
    Specification("Material", "Wood"),
    Specification("Dimensions", "80 x 60 x 40 cm"),
    Specification("Weight", "15 kg"),
)


def name_from_id(entity_id: str) -> str:
    """'unknown-chair-42' -> 'Unknown Chair 42'; object ids -> 'Product 680dcd62'."""
    if OBJECT_ID_PATTERN.match(entity_id):
        return f"Product {entity_id[:8]}"
    words = [w for w in re.split(r"[\s_\-]+", entity_id) if w]
    return " ".join(w.capitalize() for w in words) or "Product"


def category_from_id(entity_id: str) -> Category:
    """Keyword inference for readable ids; object ids are hex and carry no words."""
    if OBJECT_ID_PATTERN.match(entity_id):
        return DEFAULT_CATEGORY
    return infer_from_text(entity_id) or DEFAULT_CATEGORY


class SyntheticFallbackBuilder:
    def build(self, entity_id: str) -> Entity:
        name = name_from_id(entity_id)
        return Entity(
            id=entity_id,
            name=name,
            description="This is a placeholder product shown when the requested product could not be loaded.",
            price=FALLBACK_PRICE,
            discount_price=FALLBACK_DISCOUNT_PRICE,
            stock=FALLBACK_STOCK,
            images=[PLACEHOLDER_IMAGE.format(text=quote_plus(name))],
            category=category_from_id(entity_id),
            ratings_average=FALLBACK_RATING,
            review_count=FALLBACK_REVIEW_COUNT,
            specifications=list(FALLBACK_SPECIFICATIONS),
            reviews=[],
        )


class SyntheticSource(SourceAdapter):
    label = "synthetic"
    persist = False
    synthetic = True
    degraded_reason = "Could not load product details from any source. Showing a placeholder product."

    def __init__(self, builder: SyntheticFallbackBuilder = None):
        self.builder = builder or SyntheticFallbackBuilder()

    def fetch(self, entity_id: str) -> Any:
        return self.builder.build(entity_id).to_dict()
