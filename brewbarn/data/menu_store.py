"""Menu helpers: menu listing with ratings and fuzzy name lookup.

Name lookup tries a case-insensitive exact match, then a whole-word match that
must single out one item, then rapidfuzz's ratio scorer against every menu
name. A query that fits several items equally well matches nothing.
"""
import re
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from rapidfuzz import fuzz, process
from sqlalchemy.orm import Session

from .models import MenuItem, ProductReview


class MenuStore:
    def __init__(self, db: Session):
        self.db = db

    def list_items(self, category: Optional[str] = None) -> List[MenuItem]:
        query = self.db.query(MenuItem)
        if category:
            query = query.filter(MenuItem.category == category)
        return query.order_by(MenuItem.created_at, MenuItem.id).all()

    def ratings_by_product(self) -> Dict[str, Tuple[float, int]]:
        """Return {product_name: (average_rating, review_count)}."""
        totals = defaultdict(lambda: [0, 0])
        for name, rating in self.db.query(ProductReview.product_name, ProductReview.rating):
            totals[name][0] += rating
            totals[name][1] += 1
        return {name: (total / count, count) for name, (total, count) in totals.items()}

    def list_with_ratings(self, category: Optional[str] = None) -> List[Dict]:
        ratings = self.ratings_by_product()
        result = []
        for item in self.list_items(category):
            average, count = ratings.get(item.name, (0.0, 0))
            result.append({
                "id": item.id,
                "name": item.name,
                "description": item.description,
                "price": item.price,
                "category": item.category,
                "image_url": item.image_url,
                "average_rating": average,
                "review_count": count,
            })
        return result

    def whole_word_matches(self, query: str, items: Optional[List[MenuItem]] = None) -> List[MenuItem]:
        """Menu items whose name contains the query as whole words."""
        q = (query or "").lower().strip()
        if not q:
            return []
        pattern = re.compile(rf"\b{re.escape(q)}\b")
        return [i for i in (items if items is not None else self.list_items()) if pattern.search(i.name.lower())]

    def find_best_match(self, query: str, cutoff: float = 0.8) -> Tuple[Optional[MenuItem], float]:
        """Return (menu_item, score in 0..1) or (None, 0) when nothing or several items fit."""
        if not query:
            return (None, 0.0)
        items = self.list_items()
        if not items:
            return (None, 0.0)
        q = query.lower().strip()
        for item in items:
            if item.name.lower() == q:
                return (item, 1.0)
        hits = self.whole_word_matches(q, items)
        if len(hits) == 1:
            return (hits[0], 1.0)
        if hits:
            return (None, 0.0)
        names = [i.name for i in items]
        results = process.extract(q, names, scorer=fuzz.ratio, processor=str.lower,
                                  score_cutoff=cutoff * 100, limit=2)
        if not results:
            return (None, 0.0)
        if len(results) > 1 and results[0][1] == results[1][1]:
            return (None, 0.0)
        _, score, idx = results[0]
        return (items[idx], score / 100.0)
