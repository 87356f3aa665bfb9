"""
Main FastAPI application - Ledger & financial reporting API.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routers import accounts, journal, reports
from app.application.dto.accounting_dto import ErrorResponseDTO
from app.core.config import get_settings
from app.core.logging_config import configure_logging, get_logger
from app.domain.exceptions import (
    DataSourceError,
    LedgerError,
    NotFoundError,
    UnbalancedEntryError,
    ValidationError,
)
from app.infrastructure.database import init_db

logger = get_logger("api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan - startup and shutdown events."""
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format)
    init_db()
    yield


app = FastAPI(
    title="Ledger API",
    description="""
## Double-entry ledger and financial reporting

### Features:
- **Chart of accounts**: hierarchical, typed accounts
- **Journal entries**: balanced posting (debits = credits), reversal by offsetting entry
- **Trial balance**: point-in-time balances with normal-balance sign conventions
- **Reports**: sales, inventory, profit and loss, cash flow, branch financials, inventory turnover, branch expenses by category

### Rules:
- Posted entries are never edited or deleted
- Every check runs before anything is written
- A report either completes or fails as a whole
    """,
    version="0.1.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(accounts.router)
app.include_router(journal.router)
app.include_router(reports.router)


@app.get("/")
def root():
    return {
        "name": "Ledger API",
        "version": "0.1.0",
        "docs": "/docs"
    }


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


def _error(status_code: int, exc: LedgerError) -> JSONResponse:
    body = ErrorResponseDTO(code=exc.code, detail=str(exc))
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return _error(400, exc)


@app.exception_handler(UnbalancedEntryError)
async def unbalanced_entry_handler(request: Request, exc: UnbalancedEntryError):
    return _error(422, exc)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return _error(404, exc)


@app.exception_handler(DataSourceError)
async def data_source_error_handler(request: Request, exc: DataSourceError):
    logger.error("Request failed on data source", extra={"path": request.url.path, "source": exc.source})
    return _error(503, exc)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
