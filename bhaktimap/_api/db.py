from __future__ import annotations

import os
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from dotenv import load_dotenv
from pymongo import DESCENDING, MongoClient
from pymongo.collection import Collection

from bhaktimap.utils import read_json, write_json
from .filters import TraditionFilter


INDEXED_FIELDS = ("saint", "tradition", "traditionType")


def get_mongodb_uri() -> str:
    load_dotenv()
    url = os.environ.get("MONGODB_URI")
    if not url:
        raise RuntimeError("MONGODB_URI not set in .env")
    return url


def get_collection() -> Collection:
    load_dotenv()
    client = MongoClient(
        get_mongodb_uri(),
        serverSelectionTimeoutMS=5000,
        socketTimeoutMS=45000,
    )
    db = client[os.environ.get("DB_NAME", "bhakti")]
    return db[os.environ.get("COLLECTION", "traditions")]


def _with_str_id(doc: Dict[str, Any]) -> Dict[str, Any]:
    if "_id" in doc:
        doc["_id"] = str(doc["_id"])
    return doc


class MongoTraditionStore:
    def __init__(self, collection: Collection) -> None:
        self.collection = collection

    def ensure_indexes(self) -> None:
        for f in INDEXED_FIELDS:
            self.collection.create_index([(f, 1)])

    def find(self, flt: TraditionFilter, limit: int = 1000) -> List[Dict[str, Any]]:
        cursor = self.collection.find(flt.to_mongo()).sort("_id", DESCENDING).limit(limit)
        return [_with_str_id(d) for d in cursor]

    def distinct_values(self, fields: Sequence[str]) -> Dict[str, List[Any]]:
        pipeline = [
            {"$group": {"_id": None, **{f: {"$addToSet": f"${f}"} for f in fields}}},
        ]
        rows = list(self.collection.aggregate(pipeline))
        if not rows:
            return {f: [] for f in fields}
        return {f: list(rows[0].get(f) or []) for f in fields}

    def insert(self, document: Dict[str, Any]) -> str:
        res = self.collection.insert_one(dict(document))
        return str(res.inserted_id)


class JsonTraditionStore:
    """
    Records kept in one JSON array file, oldest first. Queries run the
    filter in-process with TraditionFilter.matches.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.records: List[Dict[str, Any]] = read_json(self.path, []) or []

    def ensure_indexes(self) -> None:
        pass

    def find(self, flt: TraditionFilter, limit: int = 1000) -> List[Dict[str, Any]]:
        hits = [dict(r) for r in reversed(self.records) if flt.matches(r)]
        return hits[:limit]

    def distinct_values(self, fields: Sequence[str]) -> Dict[str, List[Any]]:
        out: Dict[str, List[Any]] = {}
        for f in fields:
            seen: Dict[Any, None] = {}
            for r in self.records:
                v = r.get(f)
                if v is not None and not isinstance(v, (list, dict)):
                    seen.setdefault(v, None)
            out[f] = list(seen)
        return out

    def insert(self, document: Dict[str, Any]) -> str:
        doc = {k: (v.isoformat() if isinstance(v, datetime) else v) for k, v in document.items()}
        doc_id = doc.get("_id") or uuid.uuid4().hex
        doc["_id"] = str(doc_id)
        self.records.append(doc)
        write_json(self.path, self.records)
        return doc["_id"]


def get_store(backend: Optional[str] = None):
    load_dotenv()
    backend = (backend or os.environ.get("STORE_BACKEND", "mongo")).lower()
    if backend == "json":
        return JsonTraditionStore(Path(os.environ.get("DATA_FILE", "data/traditions.json")))
    if backend == "mongo":
        return MongoTraditionStore(get_collection())
    raise RuntimeError(f"Unknown STORE_BACKEND: {backend!r} (expected 'mongo' or 'json')")
