## `bhaktimap/utils.py`

from __future__ import annotations

import json
import re
import unicodedata
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Tuple

import ftfy
import pandas as pd
import regex as reg


# --------- I/O helpers ---------

def ensure_dir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def write_json(path: Path, payload: Any) -> None:
    ensure_dir(path.parent)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2, default=str)

def read_json(path: Path, default: Any = None) -> Any:
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        return default

def is_nullish(x: Any) -> bool:
    if x is None:
        return True
    if isinstance(x, float) and pd.isna(x):
        return True
    if isinstance(x, str) and x.strip() == "":
        return True
    return False


# --------- Text cleaning / normalization ---------

_WS_RE = re.compile(r"\s+")
_MARK_RE = reg.compile(r"\p{M}+")


def clean_token(s: Optional[str]) -> str:
    """
    Conservative cleanup for a single free-text token: mojibake repair,
    NFC, whitespace collapsed and trimmed. Does not change spelling.
    """
    if is_nullish(s):
        return ""
    t = ftfy.fix_text(str(s))
    t = unicodedata.normalize("NFC", t)
    t = t.replace("\u200b", "").replace("\u200c", "").replace("\u200d", "").replace("\ufeff", "")
    return _WS_RE.sub(" ", t).strip()


def fold_diacritics(s: str) -> str:
    # Vīraśaiva -> Virasaiva
    decomposed = unicodedata.normalize("NFKD", s or "")
    return unicodedata.normalize("NFC", _MARK_RE.sub("", decomposed))


def locale_sort_key(s: str) -> Tuple[str, str]:
    """
    Dictionary-style ordering for display lists: accents and case are
    ignored first, the raw string breaks ties so the order is total.
    """
    return (fold_diacritics(s).casefold(), s)


def sorted_unique(values: List[Any]) -> List[str]:
    seen = {str(v).strip() for v in values if not is_nullish(v)}
    return sorted(seen, key=locale_sort_key)


@dataclass
class Paths:
    root: Path

    @property
    def data(self) -> Path:
        return self.root / "data"

    @property
    def logs(self) -> Path:
        return self.root / "logs"
