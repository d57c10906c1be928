"""
Category resolution for products with missing or mislabeled categories.

Decision order:
1. A category object with a real name is used as-is.
2. A bare id (or an object carrying only an id) is looked up in KNOWN_CATEGORIES.
3. Keyword rules are matched against the product name.
4. The generic Furniture category.

Step 3 also applies when the upstream name is a placeholder such as
"Category 680c9484" or "Unknown Category".
"""

import re
from typing import Any, Dict, List, Optional, Tuple

from .schema import Category, DEFAULT_CATEGORY, DEFAULT_CATEGORY_ID

KNOWN_CATEGORIES: Dict[str, str] = {
    "680c9481ab11e96a288ef6d9": "Sofa Beds",
    "680c9484ab11e96a288ef6da": "Tables",
    "680c9486ab11e96a288ef6db": "Chairs",
    "680c9489ab11e96a288ef6dc": "Wardrobes",
    "680c948eab11e96a288ef6dd": "Beds",
}

# Ordered: the first rule with a keyword contained in the text wins.
KEYWORD_RULES: List[Tuple[Tuple[str, ...], str]] = [
    (("sofa", "couch"), "Sofa Beds"),
    (("table", "desk"), "Tables"),
    (("chair", "stool"), "Chairs"),
    (("wardrobe", "cabinet", "storage"), "Wardrobes"),
    (("bed", "mattress"), "Beds"),
]

PLACEHOLDER_NAMES = {"", "unknown", "unknown category", "uncategorized"}
PLACEHOLDER_PATTERN = re.compile(r"^category[\s-]+[0-9a-f]{4,}$", re.IGNORECASE)

_ID_BY_NAME = {name: cid for cid, name in KNOWN_CATEGORIES.items()}


def is_placeholder_name(name: Any) -> bool:
    if not isinstance(name, str):
        return True
    n = name.strip()
    return n.lower() in PLACEHOLDER_NAMES or bool(PLACEHOLDER_PATTERN.match(n))


def _str_or_none(v: Any) -> Optional[str]:
    if isinstance(v, str) and v.strip():
        return v.strip()
    if isinstance(v, int) and not isinstance(v, bool):
        return str(v)
    return None


def lookup_known(category_id: Optional[str]) -> Optional[Category]:
    if category_id and category_id in KNOWN_CATEGORIES:
        return Category(category_id, KNOWN_CATEGORIES[category_id])
    return None


def infer_from_text(text: str) -> Optional[Category]:
    """Match text against KEYWORD_RULES; returns None when nothing matches."""
    lowered = (text or "").lower()
    for keywords, name in KEYWORD_RULES:
        if any(k in lowered for k in keywords):
            return Category(_ID_BY_NAME.get(name, DEFAULT_CATEGORY_ID), name)
    return None


class CategoryResolver:
    """Produces a canonical Category from whatever the backend sent."""

    def resolve(self, raw_category: Any, entity_name: str = "") -> Category:
        category_id: Optional[str] = None

        if isinstance(raw_category, dict):
            category_id = _str_or_none(raw_category.get("_id")) or _str_or_none(raw_category.get("id"))
            name = raw_category.get("name")
            if not is_placeholder_name(name):
                slug = raw_category.get("slug")
                return Category(
                    id=category_id or DEFAULT_CATEGORY_ID,
                    name=name.strip(),
                    slug=slug.strip() if isinstance(slug, str) else "",
                )
        else:
            category_id = _str_or_none(raw_category)

        known = lookup_known(category_id)
        if known is not None:
            return known

        return infer_from_text(entity_name) or DEFAULT_CATEGORY
