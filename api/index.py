"""Serverless entrypoint: exports the ReelReview FastAPI app."""

import logging
import os

from reelreview.main import app

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

logger.info("ReelReview api/index.py initialized with %d routes", len(app.routes))

__all__ = ["app"]
