"""Bakery back office FastAPI application.

Processes commands synchronously via HTTP. Every request runs inside the
``bakery`` domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV selects the config overlay in bakery/domain.toml:
#   - unset / "test" → in-memory providers
#   - "production"   → PostgreSQL via DATABASE_URL
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bakery.domain import bakery
from bakery.utils.logging import bind_request_context, clear_request_context

bakery.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Bakery Back Office API",
    description="Order pricing and payment reconciliation",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the bakery domain context and request log context for each request."""
    bind_request_context(
        method=request.method,
        path=request.url.path,
        staff_id=request.headers.get("x-staff-id"),
    )
    try:
        with bakery.domain_context():
            return await call_next(request)
    finally:
        clear_request_context()


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from bakery.api import (  # noqa: E402
    catalogue_router,
    customer_router,
    order_router,
    payment_router,
    register_error_handlers,
)

app.include_router(order_router)
app.include_router(payment_router)
app.include_router(customer_router)
app.include_router(catalogue_router)
register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": bakery.name})
