"""FastAPI application setup module."""
import logging
from contextlib import asynccontextmanager
from decimal import InvalidOperation

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError

from rfidpay.settings import settings
from rfidpay.database.database import dispose_engine
from rfidpay.endpoints.accounts import router as accounts_router
from rfidpay.endpoints.hardware import router as hardware_router
from rfidpay.endpoints.pending import router as pending_router
from rfidpay.endpoints.products import router as products_router
from rfidpay.exceptions.api_exception import APIException, ErrorKind
from rfidpay.services.scan_state_service import build_scan_tracker

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.resolve_database_url() is None:
        logger.error("Database is not configured; storage-backed endpoints will answer 500")
    if settings.API_KEY is None:
        logger.warning("API_KEY is not set; /transaction will reject every request")
    yield
    await app.state.scan_tracker.close()
    await dispose_engine()


app = FastAPI(
    title="RFID Pay API",
    description="RFID checkout and balance settlement service",
    version="1.0.0",
    debug=settings.DEBUG,
    lifespan=lifespan,
)

app.state.scan_tracker = build_scan_tracker(settings.SCAN_STATE_BACKEND)

# CORS middleware for the storefront app
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(accounts_router)
app.include_router(products_router)
app.include_router(pending_router)
app.include_router(hardware_router)


@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail, "error": exc.kind.value},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = sorted({".".join(str(part) for part in err["loc"][1:]) or "body" for err in exc.errors()})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "message": f"Missing or invalid field(s): {', '.join(fields)}",
            "error": ErrorKind.CLIENT_INPUT.value,
        },
    )


@app.exception_handler(SQLAlchemyError)
@app.exception_handler(InvalidOperation)
async def infrastructure_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled store error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Server error", "error": ErrorKind.INFRASTRUCTURE.value},
    )


@app.get("/", response_class=PlainTextResponse)
async def root():
    """Liveness check."""
    return "Server running with RFID + App endpoints"


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
