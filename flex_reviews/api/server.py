"""
Flex Reviews API Server - REST API for the manager dashboard and property pages.

Endpoints:
- GET /api/reviews/hostaway: Hostaway reviews (filters, sort, pagination)
- GET /api/reviews/google: Google reviews for a listing or place id
- GET /api/reviews: Hostaway + Google reviews merged
- GET /api/reviews/facets: Distinct filter values for the dashboard
- GET /api/properties/{listing}/reviews: Approved reviews of one listing
- GET /api/properties/{listing}/summary: Rating summary of one listing
- GET /api/approvals: Approval map
- PUT /api/approvals/{review_id}: Approve or hide a review

Provider problems never fail a request: the response carries fixture data
and the x-source header names where the data came from. Only unexpected
faults return HTTP 500 with {"status": "error", "message": ...}.
"""

import logging
from typing import Any, Callable, Dict, Optional, Tuple

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

import config.settings as settings
from flex_reviews.models.review import parse_review_id
from flex_reviews.orchestrator import ReviewService

logger = logging.getLogger(__name__)

CACHE_CONTROL = "s-maxage=120, stale-while-revalidate=60"


class ApprovalUpdate(BaseModel):
    approved: bool


def _error(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"status": "error", "message": message})


def _respond(call: Callable[[], Tuple[Dict[str, Any], Optional[str]]]) -> JSONResponse:
    """Run a handler body and wrap its payload, mapping unexpected faults to 500."""
    try:
        payload, source = call()
    except Exception as e:
        logger.error(f"Request failed: {e}", exc_info=True)
        return _error(str(e) or type(e).__name__)

    headers = {"Cache-Control": CACHE_CONTROL}
    if source:
        headers["x-source"] = source
    return JSONResponse(content=payload, headers=headers)


def create_app(service: Optional[ReviewService] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        service: Review service; built from config.settings when omitted

    Returns:
        FastAPI app
    """
    service = service or ReviewService.from_settings()

    app = FastAPI(
        title="Flex Reviews API",
        description="Review aggregation and moderation for Flex Living properties",
        version="1.0.0",
    )

    cors_origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins or ["*"],
        allow_methods=["GET", "PUT"],
        allow_headers=["*"],
        expose_headers=["x-source"],
    )

    def query_provider(request: Request, provider: str) -> JSONResponse:
        params = dict(request.query_params)

        def call():
            result, source = service.query(params, provider=provider)
            return result.to_dict(), source

        return _respond(call)

    @app.get("/api/reviews/hostaway")
    def hostaway_reviews(request: Request):
        return query_provider(request, "hostaway")

    @app.get("/api/reviews/google")
    def google_reviews(request: Request):
        return query_provider(request, "google")

    @app.get("/api/reviews/facets")
    def review_facets():
        return _respond(lambda: _success(*service.facets()))

    @app.get("/api/reviews")
    def all_reviews(request: Request):
        return query_provider(request, "all")

    @app.get("/api/properties/{listing}/reviews")
    def property_reviews(listing: str, request: Request):
        params = dict(request.query_params)

        def call():
            result, source = service.public_reviews(listing, params)
            return result.to_dict(), source

        return _respond(call)

    @app.get("/api/properties/{listing}/summary")
    def property_summary(listing: str):
        return _respond(lambda: _success(*service.listing_summary(listing)))

    @app.get("/api/approvals")
    def list_approvals():
        return _respond(lambda: ({"status": "success", "result": service.approvals.snapshot()}, None))

    @app.put("/api/approvals/{review_id}")
    def update_approval(review_id: str, body: ApprovalUpdate):
        def call():
            result = service.set_approval(parse_review_id(review_id), body.approved)
            return {"status": "success", "result": result}, None

        return _respond(call)

    logger.info("API application created")
    return app


def _success(result: Any, source: Optional[str]) -> Tuple[Dict[str, Any], Optional[str]]:
    return {"status": "success", "result": result}, source
