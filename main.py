"""
Lead Intent Scoring Engine - Main Entry Point
=============================================
Run this file to start the FastAPI server.

Usage:
    python main.py                    # Start server on port 8000
    python main.py --port 8080        # Start server on custom port
    python main.py --reload           # Start with auto-reload (dev mode)

API Documentation:
    http://localhost:8000/docs        # Swagger UI
    http://localhost:8000/redoc       # ReDoc
"""

import argparse
import logging
import os
import uvicorn
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from intent_engine.config.logging_config import configure_logging
from intent_engine.config.settings import LLM_CONFIG, PROVIDER_API_KEY_ENV

logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Lead Intent Scoring Engine API Server")
    parser.add_argument(
        "--host",
        type=str,
        default="0.0.0.0",
        help="Host to bind the server to (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to run the server on (default: 8000)",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of worker processes (default: 1)",
    )

    args = parser.parse_args()

    configure_logging()

    provider = LLM_CONFIG["provider"]
    api_key = LLM_CONFIG["api_key"] or os.getenv(PROVIDER_API_KEY_ENV.get(provider, ""), "")
    llm_status = f"enabled ({provider})" if api_key else "disabled, rule-based fallback only"

    logger.info("Starting Lead Intent Scoring Engine on http://%s:%d", args.host, args.port)
    logger.info("API docs: http://localhost:%d/docs", args.port)
    logger.info("LLM intent classification: %s", llm_status)
    if args.workers > 1:
        # Each worker holds its own in-memory store
        logger.warning("Running %d workers: offer, leads and results are not shared between them", args.workers)

    uvicorn.run(
        "intent_engine.api.endpoints:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        workers=args.workers if not args.reload else 1,
    )


if __name__ == "__main__":
    main()
