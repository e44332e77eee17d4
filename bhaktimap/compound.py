from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional

from bhaktimap.utils import clean_token, is_nullish, locale_sort_key
from bhaktimap.vocab import LANGUAGE, TRADITION, normalize


# --------- Language fields ---------

_LONG_PAREN_RE = re.compile(r"\([^()]{51,}\)")
_DIALECTS_RE = re.compile(r"\(([^()]*?)\s+dialects?\)", re.IGNORECASE)
_ANY_PAREN_RE = re.compile(r"\([^()]*\)")
_LANGUAGE_SPLIT_RE = re.compile(r"[,/;|&]|\band\b", re.IGNORECASE)
_STRAY_PAREN_RE = re.compile(r"[()]")

# Narrative glue seen in language fields ("Hindi, with Persian influences").
LANGUAGE_FILLER_PHRASES = (
    "derived terms",
    "influences",
    "influenced",
    "sometimes",
    "primary",
    "primarily",
    "mainly",
    "mostly",
    "occasionally",
    "various",
    "written in",
    "composed in",
    "later works",
    "e.g.",
    "etc.",
)

LANGUAGE_QUALIFIER_WORDS = frozenset({
    "old",
    "middle",
    "early",
    "medieval",
    "classical",
    "modern",
    "local",
    "regional",
    "vernacular",
    "dialect",
    "dialects",
    "language",
    "languages",
    "other",
    "others",
    "etc",
    "also",
})


def _keep_language_candidate(token: str) -> bool:
    if len(token) < 2:
        return False
    low = token.lower()
    if any(p in low for p in LANGUAGE_FILLER_PHRASES):
        return False
    if low in LANGUAGE_QUALIFIER_WORDS:
        return False
    return True


def _parse_language(value: str) -> List[str]:
    text = _LONG_PAREN_RE.sub(" ", value)

    # innermost groups first, so "(Braj (old), Avadhi dialects)" still yields its dialects
    candidates: List[str] = []
    prev = None
    while prev != text:
        prev = text
        for m in _DIALECTS_RE.finditer(text):
            candidates.extend(_LANGUAGE_SPLIT_RE.split(m.group(1)))
        text = _DIALECTS_RE.sub(" ", text)
        text = _ANY_PAREN_RE.sub(" ", text)

    # main tokens first so "Hindi (Braj dialects)" lists Hindi before Braj
    candidates = _LANGUAGE_SPLIT_RE.split(text) + candidates

    out: List[str] = []
    for c in candidates:
        token = clean_token(_STRAY_PAREN_RE.sub(" ", c)).strip(" .:-'\"")
        if not _keep_language_candidate(token):
            continue
        norm = normalize(LANGUAGE, token)
        if norm:
            out.append(norm)
    return out


# --------- Tradition fields ---------

_ALT_NAME_SPLIT_RE = re.compile(r"\s*[–—]\s*|\s+-\s+")
_MAIN_PAREN_RE = re.compile(r"^([^()]+?)\s*\(([^()]*)\)")
_DESCRIPTION_RE = re.compile(
    r"\b(devotion|rooted|lineage|philosophical|synthesis|movement|tradition|school|common|spiritual)",
    re.IGNORECASE,
)
_ALT_EXCLUDE_RE = re.compile(r"canon|Nayanars", re.IGNORECASE)
_PAREN_REMAINDER_RE = re.compile(r"\([^()]*\)?|\)")
_GENERIC_SUFFIX_RE = re.compile(r"\s+(tradition|movement|devotion|canon)s?\s*$", re.IGNORECASE)


def _strip_generic_suffix(token: str) -> str:
    prev = None
    while prev != token:
        prev = token
        token = _GENERIC_SUFFIX_RE.sub("", token).strip()
    return token


def _parse_tradition(value: str) -> List[str]:
    kept: List[str] = []
    for part in _ALT_NAME_SPLIT_RE.split(value):
        for sub in part.split("/"):
            sub = clean_token(sub)
            if not sub:
                continue

            m = _MAIN_PAREN_RE.match(sub)
            if m:
                main = _strip_generic_suffix(clean_token(m.group(1)))
                if len(main) > 2:
                    kept.append(main)
                paren = m.group(2).strip()
                if len(paren.split()) <= 4 and not _DESCRIPTION_RE.search(paren):
                    for alt in paren.split("/"):
                        alt = clean_token(alt)
                        if len(alt) > 3 and not _ALT_EXCLUDE_RE.search(alt):
                            kept.append(alt)
                continue

            plain = clean_token(_PAREN_REMAINDER_RE.sub(" ", sub))
            plain = _strip_generic_suffix(plain)
            if len(plain) > 2:
                kept.append(plain)

    out: List[str] = []
    for token in kept:
        norm = normalize(TRADITION, token)
        if norm:
            out.append(norm)
    return out


_PARSERS = {
    LANGUAGE: _parse_language,
    TRADITION: _parse_tradition,
}


def parse_compound(kind: str, raw_value: Optional[str]) -> List[str]:
    """
    Split one stored field value into its distinct canonical tokens.

    "Hindi (Braj, Avadhi dialects)" -> ["Hindi", "Braj Bhasha", "Awadhi"]
    "Vīraśaiva / Liṅgāyat"          -> ["Virashaiva", "Lingayat"]

    Best effort: never raises on odd text, may return an empty list.
    Order is first occurrence; duplicates collapse.
    """
    parser = _PARSERS.get(kind)
    if parser is None:
        raise ValueError(f"Unknown vocabulary kind: {kind!r}")
    if is_nullish(raw_value):
        return []
    tokens = parser(str(raw_value))
    return list(dict.fromkeys(tokens))


def extract_unique(kind: str, raw_values: Iterable[Optional[str]]) -> List[str]:
    """Distinct canonical tokens across many raw values, in dictionary order."""
    seen: Dict[str, None] = {}
    for v in raw_values:
        if is_nullish(v):
            continue
        for token in parse_compound(kind, v):
            seen.setdefault(token, None)
    return sorted(seen, key=locale_sort_key)
