"""
FastAPI entrypoint for TripLedger backend application.
"""
import logging
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from tripledger.core.config import settings
from tripledger.core.exceptions import LedgerError
from tripledger.core.logging import configure_logging
from tripledger.api.router import api_router
from tripledger.services.notifier import TripUpdateHub

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="TripLedger API",
    description="Backend API for group trip budgets and shared expenses",
    version="1.0.0"
)

# One live-update registry per process
app.state.update_hub = TripUpdateHub()

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    """Convert domain errors into JSON error responses."""
    logger.info(f"{request.method} {request.url.path} rejected with {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Report schema violations as 400 like other validation failures."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"message": "TripLedger API is running"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
