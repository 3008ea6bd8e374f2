"""Two-tier description classifier.

Tier 1 looks at the user's saved keywords; Tier 2 walks the global rule table
in declaration order. A Tier-1 hit always wins. A miss in both tiers is not an
error: the transaction simply stays uncategorized.

Matching is case-insensitive substring containment in both tiers. Saved
keywords have no meaningful order, so when several of them match the longest
(most specific) one is used; equal lengths keep store order.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import replace

from .logging_setup import get_logger
from .models import CanonicalTransaction, CategoryMatch, UserKeyword
from .rules import CATEGORY_RULES, CategoryRule
from .stores import CategoryStore, KeywordStore

logger = get_logger(__name__)


def match_user_keyword(description: str, keywords: Iterable[UserKeyword]) -> CategoryMatch | None:
    text = description.lower()
    best: UserKeyword | None = None
    for kw in keywords:
        needle = kw.keyword.lower()
        if not needle or needle not in text:
            continue
        if best is None or len(needle) > len(best.keyword):
            best = kw
    if best is None:
        return None
    return CategoryMatch(source="user", keyword=best.keyword, category_id=best.category_id)


def match_rule(description: str, rules: Sequence[CategoryRule] = CATEGORY_RULES) -> CategoryMatch | None:
    text = description.lower()
    for rule in rules:
        for keyword in rule.keywords:
            if keyword in text:
                return CategoryMatch(source="rule", keyword=keyword, category_name=rule.category_name)
    return None


def classify(
    description: str,
    *,
    user_keywords: Iterable[UserKeyword] = (),
    rules: Sequence[CategoryRule] = CATEGORY_RULES,
) -> CategoryMatch | None:
    """Classify ``description``; ``None`` when neither tier matches."""

    if not description or not description.strip():
        return None
    return match_user_keyword(description, user_keywords) or match_rule(description, rules)


class Classifier:
    """Store-backed classifier for one or more users.

    A user's keywords are read from the store once and reused for every
    description of the batch; call :meth:`reset` after saving new keywords.
    """

    def __init__(self, keyword_store: KeywordStore, category_store: CategoryStore) -> None:
        self._keywords = keyword_store
        self._categories = category_store
        self._snapshots: dict[str, list[UserKeyword]] = {}

    def reset(self) -> None:
        self._snapshots.clear()

    def _user_keywords(self, user_id: str) -> list[UserKeyword]:
        snap = self._snapshots.get(user_id)
        if snap is None:
            snap = self._keywords.list_keywords(user_id)
            self._snapshots[user_id] = snap
        return snap

    def classify(self, description: str, user_id: str) -> CategoryMatch | None:
        match = classify(
            description,
            user_keywords=self._user_keywords(user_id),
            rules=self._categories.list_category_rules_in_order(),
        )
        if match is None:
            logger.debug("No category for %r", description)
            return None
        if match.source == "user":
            name = self._categories.category_name(user_id, match.category_id or "")
            match = replace(match, category_name=name)
        else:
            cid = self._categories.resolve_category_id(user_id, match.category_name or "")
            match = replace(match, category_id=cid)
        logger.debug(
            "%r -> %s via %s keyword %r",
            description,
            match.category_name or match.category_id,
            match.source,
            match.keyword,
        )
        return match

    def classify_transactions(
        self, transactions: Iterable[CanonicalTransaction], user_id: str
    ) -> list[CanonicalTransaction]:
        """Return copies of ``transactions`` with category fields filled in."""

        out: list[CanonicalTransaction] = []
        for tx in transactions:
            match = self.classify(tx.description, user_id)
            if match is None:
                out.append(tx)
                continue
            out.append(
                replace(
                    tx,
                    category_id=match.category_id,
                    category_name=match.category_name,
                    match_source=match.source,
                )
            )
        return out


# ---------------------------------------------------------------------------
# Keyword suggestion
# ---------------------------------------------------------------------------

_URL_RE = re.compile(r"https?://\S+")
_WWW_RE = re.compile(r"\bwww\.")
_DOMAIN_SUFFIX_RE = re.compile(r"\.(?:com|ro|md)\b")
_LOCATION_RE = re.compile(
    r"\b(?:bucuresti|cluj|iasi|timisoara|brasov|constanta|romania|spain|madrid|barcelona)\b"
)
# Anything that is not a letter (any script) or whitespace
_NON_LETTER_RE = re.compile(r"[\W\d_]+")


def suggest_keyword(description: str) -> str:
    """Suggest a reusable keyword for ``description``.

    ``"COFIDIS SPAIN"`` -> ``"cofidis"``, ``"MEGA IMAGE BUCURESTI"`` ->
    ``"mega image"``, ``"Netflix.com"`` -> ``"netflix"``. Returns ``""`` when
    nothing usable is left. The result is only a suggestion for the user to
    confirm.
    """

    if not description:
        return ""
    s = description.lower().strip()
    s = _URL_RE.sub("", s)
    s = _WWW_RE.sub("", s)
    s = _DOMAIN_SUFFIX_RE.sub("", s)
    s = _LOCATION_RE.sub("", s)
    s = _NON_LETTER_RE.sub(" ", s)
    words = [w for w in s.split() if len(w) >= 3]
    return " ".join(words[:2])


__all__ = [
    "Classifier",
    "classify",
    "match_rule",
    "match_user_keyword",
    "suggest_keyword",
]
