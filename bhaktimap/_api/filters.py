from __future__ import annotations

import math
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from bhaktimap.utils import is_nullish


FILTER_KEYS = (
    "tradition",
    "traditionType",
    "gender",
    "period",
    "language",
    "saint",
    "search",
    "startYearMin",
    "startYearMax",
)

EXACT_FIELDS = ("traditionType", "gender")
SUBSTRING_FIELDS = ("period", "saint")
SEARCH_FIELDS = ("saint", "tradition", "philosophy")

YEAR_FIELD = "startYear"
YEAR_MIN_FALLBACK = 0


# Lower-cased canonical spelling -> every spelling seen in stored records.
# Keyed on the display forms produced by bhaktimap.vocab, so a value picked
# from the filter dropdown finds the raw records it was parsed out of.
TRADITION_SPELLINGS: Dict[str, List[str]] = {
    "lingayat": ["Liṅgāyat", "LingƒÅyat", "Virashaiva", "Vīraśaiva", "Lingayat"],
    "virashaiva": ["Vīraśaiva", "Virashaiva", "Veerashaiva", "Liṅgāyat", "Lingayat"],
    "vaishnava": ["Vaishnava", "Vaiṣṇava", "Vaisnava"],
    "sri vaishnava": ["Sri Vaishnava", "Śrī Vaiṣṇava", "Sri Vaisnava", "Shri Vaishnava"],
    "gaudiya vaishnava": ["Gaudiya Vaishnava", "Gauḍīya Vaiṣṇava", "Gaudiya Vaisnava"],
    "shaiva": ["Shaiva", "Śaiva", "Saiva"],
    "shaiva siddhanta": ["Shaiva Siddhanta", "Śaiva Siddhānta", "Saiva Siddhanta"],
    "tamil shaiva bhakti": ["Tamil Shaiva Bhakti", "Tamil Śaiva Bhakti", "Tamil Saiva Bhakti"],
    "shakta": ["Shakta", "Śākta", "Sakta"],
    "sikh": ["Sikh", "Gurmat"],
    "sufi": ["Sufi", "Ṣūfī"],
    "varkari": ["Varkari", "Vārkarī", "Warkari"],
    "pushtimarg": ["Pushtimarg", "Puṣṭimārga", "Pushti Marg"],
    "ramanandi": ["Ramanandi", "Rāmānandī"],
    "alvar": ["Alvar", "Āḻvār", "Ālvār", "Alwar", "Azhwar"],
    "nayanar": ["Nayanar", "Nāyaṉār", "Nayanmar"],
    "haridasa": ["Haridasa", "Haridāsa"],
    "mahanubhava": ["Mahanubhava", "Mahānubhāva", "Mahanubhav"],
    "kabir panth": ["Kabir Panth", "Kabīr Panth", "Kabirpanth"],
    "sant mat": ["Sant Mat", "Nirguṇa Sant", "Nirguna Sant"],
}

LANGUAGE_SPELLINGS: Dict[str, List[str]] = {
    "bengali": ["Bengali", "Bangla", "Bānglā"],
    "braj bhasha": ["Braj Bhasha", "Braj", "Brajbhasha", "Braj Bhāṣā"],
    "awadhi": ["Awadhi", "Avadhi", "Avadhī"],
    "hindi": ["Hindi", "Hindī"],
    "odia": ["Odia", "Oriya", "Odiya"],
    "kannada": ["Kannada", "Kannaḍa", "Kanarese"],
    "tamil": ["Tamil", "Tamiḻ", "Tamizh"],
    "telugu": ["Telugu", "Telegu"],
    "marathi": ["Marathi", "Marāṭhī", "Marāthī"],
    "punjabi": ["Punjabi", "Panjabi", "Pañjābī", "Gurmukhi"],
    "sanskrit": ["Sanskrit", "Saṃskṛta", "Samskrta", "Samskrit"],
    "gujarati": ["Gujarati", "Gujrati", "Gujarātī"],
    "assamese": ["Assamese", "Asamiya", "Axomiya"],
    "maithili": ["Maithili", "Maithilī"],
    "persian": ["Persian", "Farsi"],
    "sadhukkadi": ["Sadhukkadi", "Sadhukkari", "Sadhukkaḍī"],
    "rajasthani": ["Rajasthani", "Rājasthānī", "Marwari"],
}

VARIANT_FIELDS: Dict[str, Dict[str, List[str]]] = {
    "tradition": TRADITION_SPELLINGS,
    "language": LANGUAGE_SPELLINGS,
}


# --------- Predicate structure ---------

class Clause(ABC):
    @abstractmethod
    def to_mongo(self) -> Dict[str, Any]: ...

    @abstractmethod
    def matches(self, record: Mapping[str, Any]) -> bool: ...


@dataclass(frozen=True)
class Equals(Clause):
    field: str
    value: str

    def to_mongo(self) -> Dict[str, Any]:
        return {self.field: self.value}

    def matches(self, record: Mapping[str, Any]) -> bool:
        return record.get(self.field) == self.value


@dataclass(frozen=True)
class Contains(Clause):
    """Case-insensitive regex search; `pattern` is already escaped."""

    field: str
    pattern: str

    def to_mongo(self) -> Dict[str, Any]:
        return {self.field: {"$regex": self.pattern, "$options": "i"}}

    def matches(self, record: Mapping[str, Any]) -> bool:
        value = record.get(self.field)
        if not isinstance(value, str):
            return False
        return re.search(self.pattern, value, re.IGNORECASE) is not None


@dataclass(frozen=True)
class AnyOf(Clause):
    clauses: Tuple[Clause, ...]

    def to_mongo(self) -> Dict[str, Any]:
        return {"$or": [c.to_mongo() for c in self.clauses]}

    def matches(self, record: Mapping[str, Any]) -> bool:
        return any(c.matches(record) for c in self.clauses)


_YEAR_TEXT_RE = re.compile(r"-?[0-9]+")


def coerce_year(value: Any, fallback: int) -> int:
    """
    Stored year as an int, converted the way MongoDB's `$convert` to int
    does it so both stores agree: bare digit strings (no padding, no
    decimals), ints and bools as-is, doubles truncated. Anything else
    gives `fallback`.
    """
    if value is None:
        return fallback
    if isinstance(value, (bool, int)):
        return int(value)
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else fallback
    if isinstance(value, str) and _YEAR_TEXT_RE.fullmatch(value):
        return int(value)
    return fallback


@dataclass(frozen=True)
class StartYearBound(Clause):
    """
    startYear >= bound ("min") or startYear <= bound ("max").

    The stored year is a string. When it is missing or not an integer the
    "min" comparison uses 0 and the "max" comparison uses the bound itself:
    records without a year fail a positive lower bound and always pass an
    upper bound.
    """

    op: str
    bound: int

    @property
    def fallback(self) -> int:
        return YEAR_MIN_FALLBACK if self.op == "min" else self.bound

    def to_mongo(self) -> Dict[str, Any]:
        year = {
            "$convert": {
                "input": f"${YEAR_FIELD}",
                "to": "int",
                "onError": self.fallback,
                "onNull": self.fallback,
            }
        }
        cmp = "$gte" if self.op == "min" else "$lte"
        return {"$expr": {cmp: [year, self.bound]}}

    def matches(self, record: Mapping[str, Any]) -> bool:
        year = coerce_year(record.get(YEAR_FIELD), self.fallback)
        if self.op == "min":
            return year >= self.bound
        return year <= self.bound


@dataclass
class TraditionFilter:
    """AND of clauses. No clauses matches every record."""

    clauses: List[Clause] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.clauses)

    def to_mongo(self) -> Dict[str, Any]:
        if not self.clauses:
            return {}
        if len(self.clauses) == 1:
            return self.clauses[0].to_mongo()
        return {"$and": [c.to_mongo() for c in self.clauses]}

    def matches(self, record: Mapping[str, Any]) -> bool:
        return all(c.matches(record) for c in self.clauses)


# --------- Builder ---------

def _criterion(criteria: Mapping[str, Any], key: str) -> Optional[str]:
    v = criteria.get(key)
    if is_nullish(v):
        return None
    return str(v).strip()


def substring_pattern(text: str) -> str:
    return re.escape(text)


def variant_pattern(field_name: str, text: str) -> str:
    """
    Alternation over every known spelling of `text` when it is a recognized
    canonical name for `field_name`, else the escaped text itself.
    """
    spellings = VARIANT_FIELDS.get(field_name, {}).get(text.lower())
    if not spellings:
        return substring_pattern(text)
    alts = list(dict.fromkeys([text] + spellings))
    return "|".join(re.escape(s) for s in alts)


def _parse_year(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def build_filter(criteria: Mapping[str, Any]) -> TraditionFilter:
    """Turn request criteria into a TraditionFilter. Unknown or empty keys add nothing."""
    clauses: List[Clause] = []

    for key in ("tradition", "language"):
        text = _criterion(criteria, key)
        if text:
            clauses.append(Contains(key, variant_pattern(key, text)))

    for key in SUBSTRING_FIELDS:
        text = _criterion(criteria, key)
        if text:
            clauses.append(Contains(key, substring_pattern(text)))

    for key in EXACT_FIELDS:
        text = _criterion(criteria, key)
        if text:
            clauses.append(Equals(key, text))

    search = _criterion(criteria, "search")
    if search:
        pattern = substring_pattern(search)
        clauses.append(AnyOf(tuple(Contains(f, pattern) for f in SEARCH_FIELDS)))

    year_min = _parse_year(_criterion(criteria, "startYearMin"))
    if year_min is not None:
        clauses.append(StartYearBound("min", year_min))

    year_max = _parse_year(_criterion(criteria, "startYearMax"))
    if year_max is not None:
        clauses.append(StartYearBound("max", year_max))

    return TraditionFilter(clauses)
