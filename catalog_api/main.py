# catalog_api/main.py
import logging
from contextlib import asynccontextmanager
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import Engine
from sqlalchemy.orm import Session

from .config import settings
from .database import SessionLocal, create_tables, engine as main_engine
from .errors import CatalogError
from .schemas import (
    CategoryCount,
    CombinedReport,
    InitializeResult,
    Message,
    Statistics,
    TransactionOut,
    TransactionPage,
)
from . import processing, queries

logger = logging.getLogger(__name__)

# Keeps the row offset well inside a 64-bit integer
MAX_PAGE = 100_000
MAX_PER_PAGE = 1_000


def configure_logging(level: str):
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.LOG_LEVEL)
    create_tables(main_engine)
    logger.info("Transactions table ready")
    yield


app = FastAPI(
    title="Product Transactions API",
    description="API for seeding product transactions and serving monthly statistics and charts.",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["GET"],
    allow_headers=["*"],
)


@app.exception_handler(CatalogError)
async def handle_catalog_error(request: Request, exc: CatalogError):
    if exc.status_code >= 500:
        logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    # Report the first bad parameter, e.g. "Invalid page: Input should be greater than or equal to 1"
    error = exc.errors()[0]
    return JSONResponse(
        status_code=400,
        content={"error": f"Invalid {error['loc'][-1]}: {error['msg']}"},
    )


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(status_code=500, content={"error": f"An unexpected error occurred: {exc}"})


# Dependency function for engine
def get_engine():
    yield main_engine

# Dependency function for database session
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


router = APIRouter()

# This is the route for the root URL "/"
@router.get("/", response_model=Message)
def read_root():
    return {"message": "Welcome to the Product Transactions API"}

@router.get("/health")
def health():
    return {"status": "ok"}

@router.get("/initialize", response_model=InitializeResult)
def initialize(engine: Engine = Depends(get_engine)):
    """
    Replaces the stored transactions with the seed dataset.
    Entries with an unparseable date of sale are skipped.
    """
    count = processing.seed_transactions(
        engine,
        settings.SEED_SOURCE_URL,
        timeout=settings.SEED_TIMEOUT_SECONDS,
    )
    return InitializeResult(message="Database initialized successfully", count=count)

@router.get("/transactions", response_model=TransactionPage)
def list_transactions(
    month: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1, le=MAX_PAGE),
    per_page: int = Query(10, ge=1, le=MAX_PER_PAGE, alias="perPage"),
    db: Session = Depends(get_db),
):
    """
    Returns one page of the month's transactions.
    - **month**: Full month name, e.g. February (any year)
    - **search**: Matches title/description text, or the exact price
    - **page** / **perPage**: Pagination over the filtered transactions
    """
    total, records = queries.list_transactions(db, month, search=search, page=page, per_page=per_page)
    return TransactionPage(
        total=total,
        transactions=[TransactionOut.model_validate(record) for record in records],
    )

@router.get("/statistics", response_model=Statistics)
def get_statistics(month: Optional[str] = None, db: Session = Depends(get_db)):
    return queries.get_statistics(db, month)

@router.get("/bar-chart", response_model=Dict[str, int])
def get_bar_chart(month: Optional[str] = None, db: Session = Depends(get_db)):
    return queries.get_price_histogram(db, month)

@router.get("/pie-chart", response_model=List[CategoryCount])
def get_pie_chart(month: Optional[str] = None, db: Session = Depends(get_db)):
    return queries.get_category_breakdown(db, month)

@router.get("/combined", response_model=CombinedReport)
async def get_combined(month: Optional[str] = None, engine: Engine = Depends(get_engine)):
    """
    Statistics, bar chart and pie chart for one month in a single response.
    Fails as a whole if any of the three fails.
    """
    return await queries.combined(engine, month)


app.include_router(router)
# Path prefix used by the dashboard client
app.include_router(router, prefix="/api")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("catalog_api.main:app", host="0.0.0.0", port=8000)
