"""Known-good seed products, served when every live source and the cache have failed."""

import copy
from typing import Any, Dict

from .base import SourceAdapter

STATIC_PRODUCTS: Dict[str, Dict[str, Any]] = {
    "680dcd6207d80949f2c7f36e": {
        "_id": "680dcd6207d80949f2c7f36e",
        "name": "Elegant Wooden Sofa",
        "description": "A beautiful wooden sofa with comfortable cushions. Perfect for your living room.",
        "price": 24999,
        "discountPrice": 19999,
        "category": {"_id": "680c9481ab11e96a288ef6d9", "name": "Sofa Beds", "slug": "sofa-beds"},
        "stock": 15,
        "ratings": 4.7,
        "numReviews": 24,
        "images": [
            "https://placehold.co/800x600/brown/white?text=Elegant+Wooden+Sofa",
            "https://placehold.co/800x600/brown/white?text=Sofa+Side+View",
            "https://placehold.co/800x600/brown/white?text=Sofa+Front+View",
        ],
        "specifications": [
            {"name": "Material", "value": "Sheesham Wood"},
            {"name": "Dimensions", "value": "72 x 30 x 32 inches"},
            {"name": "Weight", "value": "45 kg"},
            {"name": "Seating Capacity", "value": "3 People"},
            {"name": "Cushion Material", "value": "High-density Foam"},
        ],
        "reviews": [],
    },
    "680cfe0ee4e0274a4cc9a1ea": {
        "_id": "680cfe0ee4e0274a4cc9a1ea",
        "name": "Modern Dining Table",
        "description": "A stylish dining table perfect for family gatherings and dinner parties.",
        "price": 18999,
        "discountPrice": 15999,
        "category": {"_id": "680c9484ab11e96a288ef6da", "name": "Tables", "slug": "tables"},
        "stock": 10,
        "ratings": 4.5,
        "numReviews": 18,
        "images": [
            "https://placehold.co/800x600/darkwood/white?text=Modern+Dining+Table",
            "https://placehold.co/800x600/darkwood/white?text=Table+Top+View",
            "https://placehold.co/800x600/darkwood/white?text=Table+Side+View",
        ],
        "specifications": [
            {"name": "Material", "value": "Teak Wood"},
            {"name": "Dimensions", "value": "72 x 36 x 30 inches"},
            {"name": "Weight", "value": "40 kg"},
            {"name": "Seating Capacity", "value": "6 People"},
            {"name": "Finish", "value": "Polished"},
        ],
        "reviews": [],
    },
    "680cfe1ee4e0274a4cc9a1eb": {
        "_id": "680cfe1ee4e0274a4cc9a1eb",
        "name": "Comfortable Armchair",
        "description": "A comfortable armchair with plush cushions. Perfect for relaxing with a book.",
        "price": 12999,
        "discountPrice": 9999,
        "category": {"_id": "680c9486ab11e96a288ef6db", "name": "Chairs", "slug": "chairs"},
        "stock": 20,
        "ratings": 4.8,
        "numReviews": 30,
        "images": [
            "https://placehold.co/800x600/gray/white?text=Comfortable+Armchair",
            "https://placehold.co/800x600/gray/white?text=Armchair+Side+View",
            "https://placehold.co/800x600/gray/white?text=Armchair+Front+View",
        ],
        "specifications": [
            {"name": "Material", "value": "Fabric"},
            {"name": "Dimensions", "value": "35 x 38 x 40 inches"},
            {"name": "Weight", "value": "25 kg"},
            {"name": "Cushion Material", "value": "High-density Foam"},
        ],
        "reviews": [],
    },
    "680cfe2ee4e0274a4cc9a1ec": {
        "_id": "680cfe2ee4e0274a4cc9a1ec",
        "name": "Spacious Wardrobe",
        "description": "A spacious wardrobe with multiple compartments for all your storage needs.",
        "price": 32999,
        "discountPrice": 29999,
        "category": {"_id": "680c9489ab11e96a288ef6dc", "name": "Wardrobes", "slug": "wardrobes"},
        "stock": 8,
        "ratings": 4.6,
        "numReviews": 15,
        "images": [
            "https://placehold.co/800x600/darkbrown/white?text=Spacious+Wardrobe",
            "https://placehold.co/800x600/darkbrown/white?text=Wardrobe+Open+View",
            "https://placehold.co/800x600/darkbrown/white?text=Wardrobe+Side+View",
        ],
        "specifications": [
            {"name": "Material", "value": "Engineered Wood"},
            {"name": "Dimensions", "value": "72 x 48 x 24 inches"},
            {"name": "Weight", "value": "80 kg"},
            {"name": "Number of Shelves", "value": "6"},
            {"name": "Number of Drawers", "value": "3"},
        ],
        "reviews": [],
    },
}


class StaticTableSource(SourceAdapter):
    label = "static"
    degraded_reason = "Live product data is unavailable; showing a saved catalogue entry."

    def __init__(self, products: Dict[str, Dict[str, Any]] = None):
        self.products = STATIC_PRODUCTS if products is None else products

    def fetch(self, entity_id: str) -> Any:
        product = self.products.get(entity_id)
        return copy.deepcopy(product) if product is not None else None
