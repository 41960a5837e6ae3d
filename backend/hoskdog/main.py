"""FastAPI entry point for the HOSKDOG faucet, deposit and analysis service."""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from hoskdog.api import api_router
from hoskdog.chain.context import reset_contexts
from hoskdog.config import (
	blockfrost_key,
	is_development,
	network_name,
	receiving_address,
	use_mock_slurp,
	validate_configuration,
)
from hoskdog.middleware.rate_limit import RateLimitMiddleware
from hoskdog.models import HealthResponse


LOGGER = logging.getLogger(__name__)

logging.basicConfig(level=logging.INFO)

app = FastAPI(
	title="HOSKDOG Backend",
	version="1.0.0",
	description="Token faucet, ADA deposit proxy and relationship intelligence for Cardano.",
)

default_cors: List[str] = [
	"http://localhost:3000",
	"http://127.0.0.1:3000",
	"http://localhost:8080",
]

env_origins = os.getenv("CORS_ALLOW_ORIGINS")
if env_origins:
	allowed_origins = [origin.strip() for origin in env_origins.split(",") if origin.strip()]
	if not allowed_origins:
		allowed_origins = default_cors
else:
	allowed_origins = default_cors

app.add_middleware(RateLimitMiddleware)
app.add_middleware(
	CORSMiddleware,
	allow_origins=allowed_origins,
	allow_credentials=False,
	allow_methods=["GET", "POST"],
	allow_headers=["Content-Type"],
)

app.include_router(api_router)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
	"""Flatten HTTP errors into ``{"error": ...}`` bodies."""
	if exc.status_code == 404 and exc.detail == "Not Found":
		return JSONResponse(status_code=404, content={"error": "Route not found"})
	content = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
	return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
	LOGGER.warning("Rejected request to %s: %s", request.url.path, exc.errors())
	return JSONResponse(
		status_code=400,
		content={"error": "Invalid request body", "details": [err.get("msg") for err in exc.errors()]},
	)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
	LOGGER.exception("Unhandled error on %s: %s", request.url.path, exc)
	return JSONResponse(
		status_code=500,
		content={
			"error": "Internal server error",
			"message": str(exc) if is_development() else "Something went wrong",
		},
	)


@app.get("/api/health", response_model=HealthResponse)
def healthcheck() -> HealthResponse:
	"""Readiness probe; ``configured`` reports whether Blockfrost is usable."""
	return HealthResponse(
		status="OK",
		service="HOSKDOG Backend",
		network=network_name(),
		timestamp=datetime.now(timezone.utc).isoformat(),
		configured=blockfrost_key() is not None,
	)


@app.on_event("startup")
def startup_event() -> None:
	"""Log the effective configuration and any faucet misconfiguration."""
	mode = "MOCK" if use_mock_slurp() else "PRODUCTION"
	LOGGER.info("HOSKDOG backend starting on %s (%s faucet mode)", network_name(), mode)
	LOGGER.info("Receiving address: %s...", receiving_address()[:30])

	if blockfrost_key() is None:
		LOGGER.warning("Blockfrost API key not configured; deposit endpoints will return 503")

	if not use_mock_slurp():
		for problem in validate_configuration():
			LOGGER.error("Configuration problem: %s", problem)


@app.on_event("shutdown")
def shutdown_event() -> None:
	"""Drop cached chain contexts when the service stops."""
	reset_contexts()


def run() -> None:
	"""Console entry point: validate configuration, then serve with uvicorn."""
	import uvicorn

	if not use_mock_slurp():
		problems = validate_configuration()
		if problems:
			for problem in problems:
				LOGGER.error("Configuration problem: %s", problem)
			LOGGER.error("Server startup failed due to configuration errors")
			sys.exit(1)

	uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "4000")))


if __name__ == "__main__":
	run()
