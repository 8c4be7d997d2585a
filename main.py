"""FastAPI proxy service between the booking frontend and the supplier hotel API."""

import asyncio
import sys
import os
import time as _time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Active request counter for graceful shutdown
_active_requests = 0

# Ensure project root is on path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import PORT, HOST, load_upstream_settings
from models.responses import ErrorEnvelope
from proxy.base import ProxyError, proxy_stats
from proxy.hotels import router as hotels_router
from utils.upstream_client import UpstreamClient


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Validate configuration and open/close the upstream client with the app."""
    # Fails fast when UPSTREAM_BASE_URL or UPSTREAM_API_KEY is missing
    settings = load_upstream_settings()
    upstream = UpstreamClient(settings)
    await upstream.start()
    app.state.upstream = upstream
    print(f"Upstream client ready for {settings.base_url}")
    yield
    print("Shutting down: draining active requests...")
    for _ in range(20):  # 20 * 0.5s = 10s max wait
        if _active_requests == 0:
            break
        await asyncio.sleep(0.5)
    if _active_requests > 0:
        print(f"WARNING: Shutting down with {_active_requests} active requests still in progress")
    print("Closing upstream client...")
    await upstream.stop()


app = FastAPI(title="Hotel Booking Proxy API", lifespan=lifespan)

ALLOWED_ORIGINS = os.environ.get("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


@app.middleware("http")
async def count_active_requests(request: Request, call_next):
    global _active_requests
    _active_requests += 1
    try:
        return await call_next(request)
    finally:
        _active_requests -= 1


@app.exception_handler(ProxyError)
async def proxy_error_handler(request: Request, exc: ProxyError) -> JSONResponse:
    envelope = ErrorEnvelope(error=exc.message, details=exc.details)
    return JSONResponse(envelope.model_dump(exclude_none=True), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    envelope = ErrorEnvelope(error="Invalid request parameters.", details=jsonable_encoder(exc.errors()))
    return JSONResponse(envelope.model_dump(exclude_none=True), status_code=400)


app.include_router(hotels_router)


# ── Health check ──
@app.get("/health")
async def health(request: Request):
    now = _time.time()
    upstream = getattr(request.app.state, "upstream", None)
    operations = {}
    for name, stats in proxy_stats.items():
        total = stats["success"] + stats["failure"] + stats["upstream_error"]
        success_rate = round(stats["success"] / total * 100, 1) if total > 0 else None
        last_success_ago = round(now - stats["last_success"]) if stats["last_success"] > 0 else None
        operations[name] = {
            "total_requests": total,
            "success_rate": success_rate,
            "last_success_seconds_ago": last_success_ago,
        }
    return {
        "status": "ok",
        "upstream_ready": upstream is not None and upstream.is_ready,
        "operations": operations,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=HOST, port=PORT, reload=False)
