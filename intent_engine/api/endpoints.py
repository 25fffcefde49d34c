"""
FastAPI Endpoints for the Lead Intent Scoring Engine
====================================================
RESTful API for offer submission, lead upload and intent scoring.

Base URL: http://localhost:8000

Endpoints:
- GET  /                    - API info
- GET  /api/health          - Health check
- POST /api/offer           - Create the active offer
- GET  /api/offers          - List the active offer
- POST /api/leads/upload    - Upload leads as CSV text
- GET  /api/leads           - List uploaded leads
- POST /api/score           - Score uploaded leads against the offer
- GET  /api/results         - Scoring results as JSON
- GET  /api/results/csv     - Scoring results as a CSV download
- GET  /api/stats           - Engine statistics
"""

import logging
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from ..models.schemas import (
    OfferRequest,
    LeadUploadRequest,
    BatchScoreResponse,
)
from ..config.logging_config import configure_logging
from ..engine import LeadScoringEngine
from ..exceptions import ScoringEngineError
from ..export import results_to_csv, results_to_records, export_filename
from ..ingestion import parse_leads_csv
from ..store import ScoreStore

configure_logging()
logger = logging.getLogger(__name__)


# =============================================================================
# FastAPI App Initialization
# =============================================================================

app = FastAPI(
    title="Lead Intent Scoring API",
    description="""
## Lead Intent Scoring

Scores each uploaded lead 0-100 for buying intent against your offer.

### Scoring:
- **Rule score (0-50)**: role relevance, industry fit, data completeness
- **AI intent (10/30/50)**: High / Medium / Low, with fallbacks when the LLM is unavailable

### Quick Start:
1. `POST /api/offer` with your product and ideal use cases
2. `POST /api/leads/upload` with CSV text
3. `POST /api/score`, then `GET /api/results` or `GET /api/results/csv`
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware - Allow all origins for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Storage & Engine Initialization
# =============================================================================

# In-memory storage, no durability
store = ScoreStore()


def get_default_engine() -> LeadScoringEngine:
    return LeadScoringEngine(store=store)


default_engine = get_default_engine()


# =============================================================================
# Health & Info Endpoints
# =============================================================================

@app.get("/", tags=["Info"])
async def root():
    """API information and available endpoints"""
    return {
        "service": "Lead Intent Scoring Engine",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
        "endpoints": {
            "Create Offer": "POST /api/offer",
            "Upload Leads": "POST /api/leads/upload",
            "Score": "POST /api/score",
            "Results": "GET /api/results",
            "Results CSV": "GET /api/results/csv",
            "Health": "GET /api/health",
        }
    }


@app.get("/api/health", tags=["Info"])
async def health_check():
    """Health check endpoint for monitoring"""
    return {
        "status": "healthy",
        "service": "Lead Intent Scoring Engine",
        "version": "1.0.0",
        "timestamp": datetime.utcnow().isoformat(),
        "llm_configured": default_engine.stage2.is_configured,
    }


# =============================================================================
# Offer Endpoints
# =============================================================================

@app.post("/api/offer", status_code=201, tags=["Offer"])
async def create_offer(request: OfferRequest):
    """Create the active offer (replaces any previous offer)"""
    offer = request.to_offer()
    store.set_offer(offer)
    logger.info("Active offer set to %r", offer.name)
    return {
        "message": "Offer created successfully",
        "offer": offer.model_dump(mode="json"),
    }


@app.get("/api/offers", tags=["Offer"])
async def list_offers():
    """List offers (at most the one active offer)"""
    return {"offers": [o.model_dump(mode="json") for o in store.get_offers()]}


# =============================================================================
# Lead Endpoints
# =============================================================================

@app.post("/api/leads/upload", tags=["Leads"])
async def upload_leads(request: LeadUploadRequest):
    """
    Upload leads as CSV text

    Required columns: name, role, company, industry, location, linkedin_bio.
    Replaces any previously uploaded leads.
    """
    leads = parse_leads_csv(request.csvData)
    store.set_leads(leads)
    return {
        "message": "CSV uploaded and parsed successfully",
        "leads_uploaded": len(leads),
        "sample_lead": leads[0].model_dump(mode="json") if leads else None,
    }


@app.get("/api/leads", tags=["Leads"])
async def list_leads():
    """List uploaded leads"""
    leads = store.get_leads()
    return {
        "leads": [lead.model_dump(mode="json") for lead in leads],
        "total": len(leads),
    }


# =============================================================================
# Scoring Endpoints
# =============================================================================

@app.post("/api/score", response_model=BatchScoreResponse, tags=["Scoring"])
async def run_scoring():
    """
    Score all uploaded leads against the active offer

    Replaces any previous results.
    """
    results = await default_engine.run_scoring()
    return BatchScoreResponse(total_leads_scored=len(results), results=results)


@app.get("/api/results", tags=["Scoring"])
async def get_results():
    """Latest scoring results"""
    results = store.get_results()
    return {
        "results": results_to_records(results),
        "total_scored": len(results),
    }


@app.get("/api/results/csv", tags=["Scoring"])
async def export_results_csv():
    """Latest scoring results as a CSV download"""
    results = store.get_results()
    if not results:
        return JSONResponse(
            status_code=404,
            content={"error": "No results available for export"},
        )

    return Response(
        content=results_to_csv(results),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )


# =============================================================================
# Statistics
# =============================================================================

@app.get("/api/stats", tags=["Info"])
async def get_stats():
    """Get engine statistics"""
    return {
        "engine": default_engine.get_stats(),
        "active_offer": bool(store.get_active_offer()),
        "leads": len(store.get_leads()),
        "results": len(store.get_results()),
    }


# =============================================================================
# Error Handlers
# =============================================================================

@app.exception_handler(ScoringEngineError)
async def scoring_exception_handler(request: Request, exc: ScoringEngineError):
    logger.warning("%s on %s: %s", exc.code, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "code": exc.code, **exc.details},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc),
            "type": type(exc).__name__,
        }
    )
