# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
FastAPI surface over the location resolver.

Run with: uvicorn location_engine.api:app --host 0.0.0.0 --port 8080
"""

import logging
import traceback
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .app_logging import setup_logging
from .config import settings
from .credentials import EnvCredentialStore
from .models import Category, Coordinate, LocationCandidate, ResolvedSet
from .resolver import LocationResolver

setup_logging()
logger = logging.getLogger(__name__)


class CoordinateModel(BaseModel):
    latitude: float
    longitude: float


class CandidateModel(BaseModel):
    id: str
    name: str
    address: str
    coordinate: CoordinateModel
    category: str
    source: str
    country_tag: Optional[str] = None
    rating: Optional[float] = None
    is_open: Optional[bool] = None
    price_level: Optional[int] = None
    synthetic: bool = False

    @classmethod
    def from_candidate(cls, candidate: LocationCandidate) -> "CandidateModel":
        return cls(**candidate.to_dict())


class SearchResponse(BaseModel):
    query: str
    count: int
    results: List[CandidateModel]


class NearbyResponse(BaseModel):
    count: int
    results: List[CandidateModel]


def _coordinate(lat: float, lon: float) -> Coordinate:
    try:
        return Coordinate(lat, lon)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _candidates(result: ResolvedSet) -> List[CandidateModel]:
    return [CandidateModel.from_candidate(c) for c in result]


def create_app(resolver: Optional[LocationResolver] = None) -> FastAPI:
    """Build the API around a resolver (defaults to env-configured credentials)."""
    if resolver is None:
        resolver = LocationResolver(EnvCredentialStore())

    app = FastAPI(title=settings.app_name, version=settings.app_version)
    app.state.resolver = resolver

    if settings.allow_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins_list,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/api/locations/search", response_model=SearchResponse)
    async def search_locations(
        q: str = Query(..., description="Free-text query"),
        lat: Optional[float] = None,
        lon: Optional[float] = None,
    ):
        origin_hint = None
        if lat is not None and lon is not None:
            origin_hint = _coordinate(lat, lon)

        result = await resolver.resolve(q, origin_hint)
        return SearchResponse(query=result.query, count=len(result), results=_candidates(result))

    @app.get("/api/locations/reverse", response_model=CandidateModel)
    async def reverse_geocode(lat: float, lon: float):
        candidate = await resolver.reverse_geocode(_coordinate(lat, lon))
        return CandidateModel.from_candidate(candidate)

    @app.get("/api/locations/nearby", response_model=NearbyResponse)
    async def nearby_places(
        lat: float,
        lon: float,
        category: Optional[List[str]] = Query(None),
    ):
        categories = None
        if category:
            try:
                categories = [Category(value.strip().lower()) for value in category]
            except ValueError:
                raise HTTPException(status_code=400, detail=f"Unknown category in {category}")

        result = await resolver.nearby(_coordinate(lat, lon), categories)
        return NearbyResponse(count=len(result), results=_candidates(result))

    @app.get("/api/health")
    async def health_check():
        logger.info("🏥 HEALTH CHECK: endpoint called")
        return {"status": "healthy", "version": settings.app_version, **resolver.check_health()}

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler"""
        logger.error(f"Unhandled exception: {str(exc)}")
        logger.error(traceback.format_exc())
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "message": str(exc),
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
