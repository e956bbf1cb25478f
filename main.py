import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from database import init_db
from logging_setup import configure_logging
from api.borrowers import router as borrowers_router
from api.officer import router as officer_router
from services.errors import IllegalTransition, LendingError, NotFound, StoreFailure, ValidationError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    await init_db()
    logger.info("%s started (scoring: %s)", settings.app_name,
                settings.scoring_service_url if settings.uses_remote_scoring else "local")
    yield


app = FastAPI(
    title=settings.app_name,
    description="Loan application and document review API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(borrowers_router)
app.include_router(officer_router)

_STATUS_CODES = {
    ValidationError: 400,
    NotFound: 404,
    IllegalTransition: 409,
    StoreFailure: 503,
}


@app.exception_handler(LendingError)
async def lending_error_handler(request: Request, exc: LendingError):
    code = next((c for kind, c in _STATUS_CODES.items() if isinstance(exc, kind)), 500)
    body = {"detail": str(exc), "error": type(exc).__name__}
    if isinstance(exc, IllegalTransition):
        body.update({"currentStatus": exc.current, "requestedStatus": exc.target, "allowedNext": exc.allowed})
    elif isinstance(exc, ValidationError) and exc.field:
        body["field"] = exc.field
    return JSONResponse(status_code=code, content=body)


@app.get("/health")
async def health():
    return {"status": "ok"}
