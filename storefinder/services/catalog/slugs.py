"""
Slug derivation for new stores.
The repository inserts with the slug returned here and retries on a unique-constraint
violation, so a concurrent insert of the same name is never lost.
"""

import re

from sqlalchemy import select, or_
from sqlalchemy.orm import Session

from storefinder.db.models.stores import Stores

FALLBACK_SLUG = "store"

_WHITESPACE = re.compile(r"\s+")
_DISALLOWED = re.compile(r"[^a-z0-9-]")
_HYPHENS = re.compile(r"-{2,}")


def slugify(name: str) -> str:
    """Lower-case, hyphenate whitespace, drop anything outside [a-z0-9-], tidy hyphens."""
    slug = _WHITESPACE.sub("-", name.lower())
    slug = _DISALLOWED.sub("", slug)
    slug = _HYPHENS.sub("-", slug).strip("-")
    return slug or FALLBACK_SLUG


def next_available_slug(db: Session, candidate: str) -> str:
    """
    Return candidate if unused, else candidate-N for the first N >= 2 not already taken.
    """
    stmt = select(Stores.slug).where(
        or_(Stores.slug == candidate, Stores.slug.like(f"{candidate}-%"))
    )
    taken = db.execute(stmt).scalars().all()

    pattern = re.compile(rf"^{re.escape(candidate)}(?:-(\d+))?$")
    used_suffixes = set()
    base_taken = False
    for slug in taken:
        match = pattern.match(slug)
        if not match:
            continue
        if match.group(1) is None:
            base_taken = True
        else:
            used_suffixes.add(int(match.group(1)))

    if not base_taken:
        return candidate

    n = 2
    while n in used_suffixes:
        n += 1
    return f"{candidate}-{n}"
