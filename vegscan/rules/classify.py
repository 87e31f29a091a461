"""Ingredient matching, status determination and verdict aggregation."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from ..text.tokenize import TokenData
from .reference import IngredientRecord, ReferenceData

SAFE = "safe"
WARNING = "warning"
DANGER = "danger"
UNKNOWN = "unknown"
STATUSES = (SAFE, WARNING, DANGER, UNKNOWN)

# Acceptance threshold for every fuzzy tier
FUZZY_THRESHOLD = 0.85


@dataclass(frozen=True)
class MatchResult:
    """Outcome of looking up one token or additive code."""

    input: str
    matched: bool
    match_type: str | None = None  # exact | alias | fuzzy | blacklist | whitelist | ai
    confidence: float = 0.0
    item: IngredientRecord | None = None


@dataclass
class ClassificationBucket:
    """Match results grouped by status, in processing order."""

    safe: list[MatchResult] = field(default_factory=list)
    warning: list[MatchResult] = field(default_factory=list)
    danger: list[MatchResult] = field(default_factory=list)
    unknown: list[MatchResult] = field(default_factory=list)

    def __getitem__(self, status: str) -> list[MatchResult]:
        if status not in STATUSES:
            raise KeyError(status)
        return getattr(self, status)

    def items(self) -> list[tuple[str, list[MatchResult]]]:
        return [(status, self[status]) for status in STATUSES]

    def counts(self) -> dict[str, int]:
        return {status: len(self[status]) for status in STATUSES}

    @property
    def total(self) -> int:
        return sum(self.counts().values())

    def inputs(self) -> list[str]:
        """Every classified input string, bucket by bucket."""
        return [m.input for _, matches in self.items() for m in matches]


def levenshtein_distance(a: str, b: str) -> int:
    """Unit-cost edit distance (insert, delete, substitute)."""
    previous = list(range(len(a) + 1))
    for i, cb in enumerate(b, start=1):
        current = [i]
        for j, ca in enumerate(a, start=1):
            if ca == cb:
                current.append(previous[j - 1])
            else:
                current.append(
                    min(previous[j - 1] + 1, current[j - 1] + 1, previous[j] + 1)
                )
        previous = current
    return previous[len(a)]


def similarity(a: str, b: str) -> float:
    """Case-insensitive normalized similarity in [0, 1]."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1 - levenshtein_distance(a.lower(), b.lower()) / longest


def _match_from_list(
    token: str, records: list[IngredientRecord]
) -> IngredientRecord | None:
    lowered = token.lower()
    for record in records:
        if record.name and record.name.lower() == lowered:
            return record
        if record.has_alias(token):
            return record
    return None


def match_ecode(
    code: str, *, reference: ReferenceData | None = None
) -> MatchResult | None:
    """Look up an additive code: exact first, then the first fuzzy hit."""
    ref = reference or ReferenceData.instance()
    normalized = code.upper()

    for record in ref.e_codes:
        if record.code.upper() == normalized:
            return MatchResult(code, True, "exact", 1.0, record)

    # First qualifying candidate wins; table order is the tie-break
    for record in ref.e_codes:
        score = similarity(normalized, record.code)
        if score >= FUZZY_THRESHOLD:
            return MatchResult(code, True, "fuzzy", score, record)

    return None


def match_ingredient(
    token: str, *, reference: ReferenceData | None = None
) -> MatchResult | None:
    """Look up a token in the merged ingredient + additive search space.

    Tiers: exact name/English name, then alias, then fuzzy similarity.
    """
    ref = reference or ReferenceData.instance()
    records = ref.search_space
    lowered = token.lower()

    for record in records:
        if lowered in record.names():
            return MatchResult(token, True, "exact", 1.0, record)

    for record in records:
        if record.has_alias(token):
            return MatchResult(token, True, "alias", 1.0, record)

    for record in records:
        score = similarity(lowered, record.name)
        if record.name_en:
            score = max(score, similarity(lowered, record.name_en))
        if score >= FUZZY_THRESHOLD:
            return MatchResult(token, True, "fuzzy", score, record)

    return None


def status_for_record(item: IngredientRecord) -> str:
    """Status implied by a database record.

    Only vegan, low-risk records are safe; anything short of that is a
    warning unless the record is explicitly non-vegetarian.
    """
    if item.vegetarian is False:
        return DANGER
    if item.vegan is True and item.risk == "low":
        return SAFE
    return WARNING


def determine_status(match: MatchResult | None) -> str:
    if match is None or not match.matched or match.item is None:
        return UNKNOWN
    return status_for_record(match.item)


def _check_sequence(name: str, value) -> None:
    if not isinstance(value, (list, tuple)):
        raise TypeError(f"{name} must be a list of strings, got {type(value).__name__}")


def classify(
    token_data: TokenData, *, reference: ReferenceData | None = None
) -> ClassificationBucket:
    """Classify additive codes, then tokens, into status buckets."""
    _check_sequence("e_codes", token_data.e_codes)
    _check_sequence("tokens", token_data.tokens)
    ref = reference or ReferenceData.instance()
    bucket = ClassificationBucket()

    for code in token_data.e_codes:
        match = match_ecode(code, reference=ref)
        if match is None:
            bucket.unknown.append(MatchResult(code, False))
        else:
            bucket[determine_status(match)].append(match)

    for token in token_data.tokens:
        listed = _match_from_list(token, ref.blacklist)
        if listed is not None:
            item = replace(
                listed, vegetarian=False, vegan=False, risk="high", source="blacklist"
            )
            bucket.danger.append(MatchResult(token, True, "blacklist", 1.0, item))
            continue

        listed = _match_from_list(token, ref.whitelist)
        if listed is not None:
            item = replace(
                listed, vegetarian=True, vegan=True, risk="low", source="whitelist"
            )
            bucket.safe.append(MatchResult(token, True, "whitelist", 1.0, item))
            continue

        match = match_ingredient(token, reference=ref)
        if match is None:
            bucket.unknown.append(MatchResult(token, False))
        else:
            bucket[determine_status(match)].append(match)

    return bucket


def get_final_verdict(bucket: ClassificationBucket) -> str:
    """Reduce a bucket to ``safe``, ``warning`` or ``danger``.

    Unknown items count as needing confirmation, never as safe.
    """
    if bucket.danger:
        return DANGER
    if bucket.warning or bucket.unknown:
        return WARNING
    return SAFE
