"""
Normalization of raw backend payloads into canonical Entity records.

Each known response envelope has its own decoder; decoders are tried in
ENVELOPE_DECODERS order and return the inner product object or None.
Fields are then coerced independently, so a payload missing `images`
but carrying a valid `price` still produces a usable Entity.
"""

from typing import Any, Callable, Dict, List, Optional

from .categories import CategoryResolver
from .logger import get_logger
from .schema import Entity, Specification

logger = get_logger()

RawObject = Dict[str, Any]

ID_FIELDS = ("_id", "id")


def _entity_id(obj: Any) -> Optional[str]:
    if not isinstance(obj, dict):
        return None
    for key in ID_FIELDS:
        v = obj.get(key)
        if isinstance(v, str) and v.strip():
            return v.strip()
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
    return None


def _looks_like_entity(obj: Any) -> bool:
    return _entity_id(obj) is not None


# Envelope decoders

def decode_debug(raw: Any) -> Optional[RawObject]:
    """{"data": {...}, "formats": {...}} from the debug endpoints."""
    if isinstance(raw, dict) and "formats" in raw and _looks_like_entity(raw.get("data")):
        return raw["data"]
    return None


def decode_success(raw: Any) -> Optional[RawObject]:
    """{"success": true, "data": {...}}"""
    if isinstance(raw, dict) and raw.get("success") is True and _looks_like_entity(raw.get("data")):
        return raw["data"]
    return None


def decode_wrapped(raw: Any) -> Optional[RawObject]:
    """{"data": {...}}"""
    if isinstance(raw, dict) and _looks_like_entity(raw.get("data")):
        return raw["data"]
    return None


def decode_bare(raw: Any) -> Optional[RawObject]:
    """The product object itself."""
    if _looks_like_entity(raw):
        return raw
    return None


ENVELOPE_DECODERS: List[Callable[[Any], Optional[RawObject]]] = [
    decode_debug,
    decode_success,
    decode_wrapped,
    decode_bare,
]


def extract_entity_object(raw: Any) -> Optional[RawObject]:
    for decode in ENVELOPE_DECODERS:
        obj = decode(raw)
        if obj is not None:
            return obj
    return None


# Field coercion

def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool) and v == v


def _text(v: Any) -> str:
    return v if isinstance(v, str) else ""


def _non_negative(v: Any) -> float:
    return v if _is_number(v) and v >= 0 else 0


def _first_present(obj: RawObject, *keys: str) -> Any:
    for k in keys:
        if obj.get(k) is not None:
            return obj[k]
    return None


def _rating(v: Any) -> float:
    return v if _is_number(v) and 0 <= v <= 5 else 0


def _discount(v: Any) -> Optional[float]:
    return v if _is_number(v) and v >= 0 else None


def _images(v: Any) -> List[str]:
    if isinstance(v, str) and v.strip():
        return [v]
    if not isinstance(v, list):
        return []
    return [img for img in v if isinstance(img, str) and img.strip()]


def _specifications(v: Any) -> List[Specification]:
    if not isinstance(v, list):
        return []
    specs = []
    for item in v:
        if not isinstance(item, dict):
            continue
        name, value = item.get("name"), item.get("value")
        if isinstance(name, str) and name.strip() and value is not None:
            specs.append(Specification(name, value if isinstance(value, str) else str(value)))
    return specs


def _reviews(v: Any) -> List[Any]:
    return list(v) if isinstance(v, list) else []


def ids_correlate(requested_id: str, candidate_id: str, fuzzy: bool = False) -> bool:
    """Exact match, or for fuzzy sources either id containing the other."""
    if candidate_id == requested_id:
        return True
    if fuzzy and candidate_id and requested_id:
        return candidate_id in requested_id or requested_id in candidate_id
    return False


class EntityNormalizer:
    def __init__(self, category_resolver: Optional[CategoryResolver] = None):
        self.category_resolver = category_resolver or CategoryResolver()

    def normalize(self, raw: Any, requested_id: str = "") -> Optional[Entity]:
        """
        Convert a raw payload into an Entity.

        Args:
            raw: Decoded JSON from any source
            requested_id: The id being resolved, for diagnostics only

        Returns:
            Entity, or None when no product object with an identifier is found
        """
        obj = extract_entity_object(raw)
        if obj is None:
            logger.debug("No product object in payload", id=requested_id, payload_type=type(raw).__name__)
            return None

        name = _text(obj.get("name"))
        return Entity(
            id=_entity_id(obj),
            name=name,
            description=_text(obj.get("description")),
            price=_non_negative(obj.get("price")),
            discount_price=_discount(obj.get("discountPrice")),
            stock=_non_negative(obj.get("stock")),
            images=_images(obj.get("images")),
            category=self.category_resolver.resolve(obj.get("category"), name),
            ratings_average=_rating(_first_present(obj, "ratingsAverage", "ratings")),
            review_count=_non_negative(_first_present(obj, "reviewCount", "numReviews")),
            specifications=_specifications(obj.get("specifications")),
            reviews=_reviews(obj.get("reviews")),
        )
