from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from fastapi import Body, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from bhaktimap.compound import extract_unique
from bhaktimap.utils import sorted_unique
from bhaktimap.vocab import LANGUAGE, TRADITION
from .contributions import build_tradition_document, geocode_places, validate_contribution
from .db import get_store
from .filters import FILTER_KEYS, build_filter
from .geocode import NominatimGeocoder, SuggestionCache
from .markers import legacy_marker, project

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

API_HOST = os.environ.get("API_HOST", "0.0.0.0")
API_PORT = int(os.environ.get("API_PORT", os.environ.get("PORT", "3000")))
ENVIRONMENT = os.environ.get("ENVIRONMENT", "development")
API_VERSION = "1.0.1"

FIND_LIMIT = int(os.environ.get("FIND_LIMIT", "1000"))
SUGGEST_CACHE_SECONDS = float(os.environ.get("SUGGEST_CACHE_SECONDS", "300"))
SUGGEST_MIN_CHARS = int(os.environ.get("SUGGEST_MIN_CHARS", "3"))
SUGGEST_CACHE_MAX_ENTRIES = int(os.environ.get("SUGGEST_CACHE_MAX_ENTRIES", "1000"))
SUGGEST_LIMIT = 5

OPTION_FIELDS = ("tradition", "traditionType", "gender", "language", "period", "saint")


class FilterOptions(BaseModel):
    traditions: List[str] = []
    traditionTypes: List[str] = []
    genders: List[str] = []
    languages: List[str] = []
    periods: List[str] = []
    saints: List[str] = []


class ContributeResponse(BaseModel):
    id: str
    insertedId: str
    message: str
    success: bool = True


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def build_filter_options(store) -> FilterOptions:
    raw = store.distinct_values(OPTION_FIELDS)
    return FilterOptions(
        traditions=extract_unique(TRADITION, raw.get("tradition", [])),
        languages=extract_unique(LANGUAGE, raw.get("language", [])),
        traditionTypes=sorted_unique(raw.get("traditionType", [])),
        genders=sorted_unique(raw.get("gender", [])),
        periods=sorted_unique(raw.get("period", [])),
        saints=sorted_unique(raw.get("saint", [])),
    )


def create_app(store=None, geocoder=None, suggestion_cache: Optional[SuggestionCache] = None) -> FastAPI:
    """
    Build the API around one store, one geocoder and one suggestion cache.
    Missing collaborators are created from the environment.
    """
    store = store if store is not None else get_store()
    geocoder = geocoder if geocoder is not None else NominatimGeocoder()
    suggestions = suggestion_cache if suggestion_cache is not None else SuggestionCache(
        ttl=SUGGEST_CACHE_SECONDS, max_entries=SUGGEST_CACHE_MAX_ENTRIES,
    )

    store.ensure_indexes()

    app = FastAPI(title="Bhakti Tradition Map API", version=API_VERSION)
    app.state.store = store
    app.state.geocoder = geocoder
    app.state.suggestions = suggestions

    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info("%s %s", request.method, request.url.path)
        return await call_next(request)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            return JSONResponse(
                status_code=404,
                content={"error": "Route not found", "path": request.url.path, "method": request.method},
            )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(Exception)
    async def server_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Server error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "message": str(exc) if ENVIRONMENT == "development" else "Something went wrong",
                "timestamp": _now_iso(),
            },
        )

    @app.get("/api/health")
    def health() -> Dict[str, Any]:
        return {"ok": True, "timestamp": _now_iso(), "environment": ENVIRONMENT, "version": API_VERSION}

    @app.get("/api/suggest-places/{query}")
    def suggest_places(query: str) -> List[Dict[str, Any]]:
        q = (query or "").strip()
        if len(q) < SUGGEST_MIN_CHARS:
            return []
        cached = suggestions.get(q)
        if cached is not None:
            return cached
        found = geocoder.suggest(q, limit=SUGGEST_LIMIT)
        suggestions.put(q, found)
        return found

    @app.get("/api/filter-options", response_model=FilterOptions)
    def filter_options() -> FilterOptions:
        return build_filter_options(store)

    @app.get("/api/traditions")
    def traditions(request: Request) -> List[Dict[str, Any]]:
        params = request.query_params
        criteria = {k: params.get(k) for k in FILTER_KEYS if params.get(k) is not None}
        flt = build_filter(criteria)
        logger.info("Filter query: %s", flt.to_mongo())

        docs = store.find(flt, limit=FIND_LIMIT)
        logger.info("Found %d traditions", len(docs))

        markers = [m for d in docs for m in project(d)]
        place_type = params.get("placeType")
        if place_type and place_type != "all":
            markers = [m for m in markers if m["type"] == place_type]

        logger.info("Returning %d markers", len(markers))
        return markers

    @app.post("/api/contribute", response_model=ContributeResponse)
    def contribute(body: Any = Body(...)):
        errors = validate_contribution(body)
        if errors:
            return JSONResponse(status_code=400, content={"error": "Validation failed", "details": errors})

        places = geocode_places(body.get("places"), geocoder)
        doc = build_tradition_document(body, places)
        inserted_id = store.insert(doc)
        logger.info("Contribution added: %s (%s)", doc["saint"], inserted_id)

        return ContributeResponse(
            id=inserted_id,
            insertedId=inserted_id,
            message=f"Thank you for contributing information about {doc['saint']}!",
        )

    @app.get("/api/places")
    def places() -> List[Dict[str, Any]]:
        docs = store.find(build_filter({}), limit=FIND_LIMIT)
        return [legacy_marker(m) for d in docs for m in project(d)]

    return app


def main() -> None:
    import uvicorn

    logger.info("Starting Bhakti Tradition Map API on %s:%s (%s)", API_HOST, API_PORT, ENVIRONMENT)
    uvicorn.run(create_app(), host=API_HOST, port=API_PORT)


if __name__ == "__main__":
    main()
