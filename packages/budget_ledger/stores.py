"""Keyword and category stores consumed by the classifier.

The classifier only needs three questions answered: which keywords a user
saved, which global rules apply (in order), and which of the user's category
rows a rule name refers to. ``KeywordStore`` and ``CategoryStore`` describe
that surface; in-memory implementations back tests and dry runs, and the
``Sql*`` implementations read the ``lg_*`` tables through a caller-owned
session.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.ledger import LgCategory, LgUserKeyword

from .logging_setup import get_logger
from .models import UserKeyword
from .rules import CATEGORY_RULES, CategoryRule, category_type

logger = get_logger(__name__)


def normalize_keyword(keyword: str) -> str:
    return " ".join(keyword.split()).lower()


def _name_key(name: str) -> str:
    return name.strip().casefold()


# ---------------------------------------------------------------------------
# Interfaces
# ---------------------------------------------------------------------------


class KeywordStore(Protocol):
    def list_keywords(self, user_id: str) -> list[UserKeyword]: ...


class CategoryStore(Protocol):
    def list_category_rules_in_order(self) -> Sequence[CategoryRule]: ...

    def resolve_category_id(self, user_id: str, name: str) -> str | None: ...

    def category_name(self, user_id: str, category_id: str) -> str | None: ...


# ---------------------------------------------------------------------------
# In-memory
# ---------------------------------------------------------------------------


class InMemoryKeywordStore:
    def __init__(self, keywords: Iterable[UserKeyword] = ()) -> None:
        self._keywords: list[UserKeyword] = list(keywords)

    def add(self, user_id: str, keyword: str, category_id: str) -> UserKeyword:
        kw = UserKeyword(user_id=user_id, keyword=normalize_keyword(keyword), category_id=category_id)
        self._keywords.append(kw)
        return kw

    def list_keywords(self, user_id: str) -> list[UserKeyword]:
        return [k for k in self._keywords if k.user_id == user_id]


class InMemoryCategoryStore:
    """Per-user ``name -> id`` maps over a fixed rule table."""

    def __init__(self, rules: Sequence[CategoryRule] = CATEGORY_RULES) -> None:
        self._rules = tuple(rules)
        self._by_user: dict[str, dict[str, tuple[str, str]]] = {}

    @classmethod
    def with_system_categories(
        cls, user_id: str, rules: Sequence[CategoryRule] = CATEGORY_RULES
    ) -> InMemoryCategoryStore:
        """A store where ``user_id`` owns one category per rule, keyed by its name.

        Mirrors what :func:`seed_system_categories` creates, without a database.
        """

        store = cls(rules)
        for rule in rules:
            store.add(user_id, rule.category_name, rule.category_name)
        return store

    def add(self, user_id: str, name: str, category_id: str) -> None:
        self._by_user.setdefault(user_id, {})[_name_key(name)] = (category_id, name)

    def list_category_rules_in_order(self) -> Sequence[CategoryRule]:
        return self._rules

    def resolve_category_id(self, user_id: str, name: str) -> str | None:
        hit = self._by_user.get(user_id, {}).get(_name_key(name))
        return hit[0] if hit else None

    def category_name(self, user_id: str, category_id: str) -> str | None:
        for cid, name in self._by_user.get(user_id, {}).values():
            if cid == category_id:
                return name
        return None


# ---------------------------------------------------------------------------
# SQLAlchemy
# ---------------------------------------------------------------------------


class SqlKeywordStore:
    def __init__(self, session: Session) -> None:
        self._session = session

    def list_keywords(self, user_id: str) -> list[UserKeyword]:
        stmt = (
            select(LgUserKeyword.keyword, LgUserKeyword.category_id)
            .where(LgUserKeyword.user_id == user_id)
            .order_by(LgUserKeyword.keyword)
        )
        return [
            UserKeyword(user_id=user_id, keyword=kw, category_id=cid)
            for kw, cid in self._session.execute(stmt)
        ]


class SqlCategoryStore:
    """Category lookups against ``lg_categories``.

    Names are compared case-insensitively in Python (SQLite's ``lower()`` only
    folds ASCII, and category names carry diacritics). The user's categories
    are loaded once per store instance.
    """

    def __init__(self, session: Session, rules: Sequence[CategoryRule] = CATEGORY_RULES) -> None:
        self._session = session
        self._rules = tuple(rules)
        self._cache: dict[str, list[tuple[str, str]]] = {}

    def _categories(self, user_id: str) -> list[tuple[str, str]]:
        if user_id not in self._cache:
            stmt = (
                select(LgCategory.id, LgCategory.name)
                .where(LgCategory.user_id == user_id)
                .order_by(LgCategory.created_at, LgCategory.id)
            )
            self._cache[user_id] = [(cid, name) for cid, name in self._session.execute(stmt)]
        return self._cache[user_id]

    def list_category_rules_in_order(self) -> Sequence[CategoryRule]:
        return self._rules

    def resolve_category_id(self, user_id: str, name: str) -> str | None:
        key = _name_key(name)
        for cid, cname in self._categories(user_id):
            if _name_key(cname) == key:
                return cid
        return None

    def category_name(self, user_id: str, category_id: str) -> str | None:
        for cid, cname in self._categories(user_id):
            if cid == category_id:
                return cname
        return None


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


def save_user_keyword(session: Session, *, user_id: str, keyword: str, category_id: str) -> LgUserKeyword:
    """Store a Tier-1 override for ``user_id``.

    The keyword is lowercased with whitespace collapsed. Saving a keyword the
    user already has re-points it at ``category_id`` instead of adding a second
    row.
    """

    kw = normalize_keyword(keyword)
    if not kw:
        raise ValueError("keyword must not be empty")
    category = session.get(LgCategory, category_id)
    if category is None or category.user_id != user_id:
        raise ValueError(f"unknown category for user: {category_id!r}")

    existing = session.scalars(
        select(LgUserKeyword).where(LgUserKeyword.user_id == user_id, LgUserKeyword.keyword == kw)
    ).first()
    if existing is not None:
        existing.category_id = category_id
        session.flush()
        logger.info("Updated keyword %r -> %s", kw, category.name)
        return existing

    row = LgUserKeyword(user_id=user_id, keyword=kw, category_id=category_id)
    session.add(row)
    session.flush()
    logger.info("Saved keyword %r -> %s", kw, category.name)
    return row


def seed_system_categories(
    session: Session, *, user_id: str, rules: Sequence[CategoryRule] = CATEGORY_RULES
) -> list[LgCategory]:
    """Create one system category per rule for ``user_id``; existing names are kept.

    Returns the categories that were created (empty on a re-run).
    """

    existing = {
        _name_key(name)
        for name in session.scalars(select(LgCategory.name).where(LgCategory.user_id == user_id))
    }
    created: list[LgCategory] = []
    for rule in rules:
        if _name_key(rule.category_name) in existing:
            continue
        row = LgCategory(
            user_id=user_id,
            name=rule.category_name,
            type=category_type(rule.category_name),
            icon=rule.icon,
            description=rule.description,
            is_system_category=True,
        )
        session.add(row)
        created.append(row)
    session.flush()
    if created:
        logger.info("Seeded %d system categories for user %s", len(created), user_id)
    return created


__all__ = [
    "KeywordStore",
    "CategoryStore",
    "InMemoryKeywordStore",
    "InMemoryCategoryStore",
    "SqlKeywordStore",
    "SqlCategoryStore",
    "normalize_keyword",
    "save_user_keyword",
    "seed_system_categories",
]
