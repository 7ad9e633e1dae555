"""
Weighted full-text search over store name and description.

Scoring follows the per-field coefficient of a MongoDB text index: for every field and
every distinct query term it contains, score += weight * (0.5 * count / n_tokens + 0.5).
"""

import re
from collections import Counter
from typing import Optional

from sqlalchemy import select, or_
from sqlalchemy.orm import Session

from storefinder.db.models.stores import Stores

from .types import SearchHit

FIELD_WEIGHTS = {
    "name": 2.0,
    "description": 1.0,
}

STOP_WORDS = frozenset({
    "a", "an", "and", "are", "as", "at", "be", "by", "for", "from", "in", "is",
    "it", "of", "on", "or", "that", "the", "this", "to", "was", "with",
})

_TOKEN = re.compile(r"[a-z0-9]+")


def tokenize(text: Optional[str]) -> list[str]:
    return _TOKEN.findall((text or "").lower())


def query_terms(query: Optional[str]) -> list[str]:
    """Distinct non-stop-word terms of a query, in first-seen order."""
    terms = []
    for token in tokenize(query):
        if token not in STOP_WORDS and token not in terms:
            terms.append(token)
    return terms


def relevance_score(store: Stores, terms: list[str]) -> float:
    score = 0.0
    for field, weight in FIELD_WEIGHTS.items():
        tokens = tokenize(getattr(store, field))
        if not tokens:
            continue
        counts = Counter(tokens)
        for term in terms:
            if term in counts:
                score += weight * (0.5 * counts[term] / len(tokens) + 0.5)
    return score


def search_stores(db: Session, query: str, limit: int = 5) -> list[SearchHit]:
    """Stores matching query, best first, at most `limit`. Equal scores keep id order."""
    terms = query_terms(query)
    if not terms or limit <= 0:
        return []

    # Substring prefilter; exact token matching happens in relevance_score
    clauses = []
    for term in terms:
        clauses.append(Stores.name.ilike(f"%{term}%"))
        clauses.append(Stores.description.ilike(f"%{term}%"))
    stmt = select(Stores).where(or_(*clauses)).order_by(Stores.id)
    candidates = db.execute(stmt).scalars().all()

    hits = [SearchHit(store=s, score=relevance_score(s, terms)) for s in candidates]
    hits = [h for h in hits if h.score > 0]
    hits.sort(key=lambda h: h.score, reverse=True)
    return hits[:limit]
