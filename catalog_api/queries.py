# catalog_api/queries.py
import asyncio
import logging
import math
from contextlib import contextmanager
from typing import Optional

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import case, extract, func, or_, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import InvalidMonthError, StoreError
from .models import Transaction

logger = logging.getLogger(__name__)

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]
MONTH_NUMBERS = {name: number for number, name in enumerate(MONTH_NAMES, start=1)}

# (label, lower bound). Each bucket runs up to the next bucket's lower bound.
PRICE_BUCKETS = [
    ("0-100", 0),
    ("101-200", 101),
    ("201-300", 201),
    ("301-400", 301),
    ("401-500", 401),
    ("501-600", 501),
    ("601-700", 601),
    ("701-800", 701),
    ("801-900", 801),
    ("901-above", 901),
]


def month_name_to_number(name: Optional[str]) -> int:
    """
    Maps a full English month name ("February") to its number (2).

    Raises:
        InvalidMonthError: If the name is missing or not one of the twelve
            month names, spelled out and capitalized
    """
    if not name:
        raise InvalidMonthError("Month is required (e.g., 'February').")
    number = MONTH_NUMBERS.get(name)
    if number is None:
        raise InvalidMonthError("Invalid month name. Use full name (e.g., 'February').")
    return number


def _in_month(month_number: int):
    # Calendar month of the sale, any year
    return extract("month", Transaction.date_of_sale) == month_number


def _parse_price(text: str) -> Optional[float]:
    # float() accepts digit separators ("1_000"); a search term must be a plain number
    if "_" in text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


@contextmanager
def _store_errors(action: str):
    try:
        yield
    except SQLAlchemyError as e:
        raise StoreError(f"Failed to {action}: {e}") from e


def list_transactions(
    db: Session,
    month: Optional[str],
    search: Optional[str] = None,
    page: int = 1,
    per_page: int = 10,
):
    """
    Returns one page of the transactions sold in the given month.

    A search term matches the title or description as a case-insensitive
    substring, or the price exactly when the term is a number. Results are
    ordered by external id. The returned total is the size of this page.

    Returns:
        tuple[int, list[Transaction]]
    """
    month_number = month_name_to_number(month)

    query = select(Transaction).where(_in_month(month_number))
    if search:
        conditions = [
            Transaction.title.icontains(search, autoescape=True),
            Transaction.description.icontains(search, autoescape=True),
        ]
        price = _parse_price(search)
        if price is not None:
            conditions.append(Transaction.price == price)
        query = query.where(or_(*conditions))

    query = (
        query.order_by(Transaction.external_id)
        .offset((page - 1) * per_page)
        .limit(per_page)
    )

    with _store_errors("list transactions"):
        records = list(db.scalars(query).all())
    return len(records), records


def get_statistics(db: Session, month: Optional[str]) -> dict:
    """Total sale amount and sold/not sold item counts for the month."""
    month_number = month_name_to_number(month)

    sold_price = case((Transaction.sold.is_(True), Transaction.price), else_=0)
    sold_count = case((Transaction.sold.is_(True), 1), else_=0)
    query = select(
        func.coalesce(func.sum(sold_price), 0),
        func.coalesce(func.sum(sold_count), 0),
        func.count(Transaction.pk),
    ).where(_in_month(month_number))

    with _store_errors("compute statistics"):
        total_sale, sold_items, total = db.execute(query).one()

    return {
        "totalSale": float(total_sale),
        "soldItems": int(sold_items),
        "notSoldItems": int(total) - int(sold_items),
    }


def get_price_histogram(db: Session, month: Optional[str]) -> dict:
    """
    Counts the month's transactions per price bucket.

    Every bucket label is present, in ascending order, with zero for
    empty buckets.
    """
    month_number = month_name_to_number(month)

    # Highest lower bound first so the first match wins
    bucket = case(
        *[(Transaction.price >= lower, label) for label, lower in reversed(PRICE_BUCKETS[1:])],
        else_=PRICE_BUCKETS[0][0],
    ).label("bucket")
    query = (
        select(bucket, func.count(Transaction.pk))
        .where(_in_month(month_number))
        .group_by(bucket)
    )

    with _store_errors("build price histogram"):
        counts = dict(db.execute(query).all())

    return {label: counts.get(label, 0) for label, _ in PRICE_BUCKETS}


def get_category_breakdown(db: Session, month: Optional[str]) -> list:
    """
    Counts the month's transactions per category.

    Transactions without a category form their own group, listed first;
    the rest follow in category name order.
    """
    month_number = month_name_to_number(month)

    query = (
        select(Transaction.category, func.count(Transaction.pk))
        .where(_in_month(month_number))
        .group_by(Transaction.category)
    )

    with _store_errors("build category breakdown"):
        rows = db.execute(query).all()

    rows = sorted(rows, key=lambda row: (row[0] is not None, row[0] or ""))
    return [{"_id": category, "count": count} for category, count in rows]


async def combined(engine: Engine, month: Optional[str]) -> dict:
    """
    Runs statistics, price histogram and category breakdown side by side.

    The month is checked before anything is dispatched. Each query gets its
    own session; the first failure is raised and the other results dropped.
    """
    month_name_to_number(month)

    def run(operation):
        with Session(engine) as db:
            return operation(db, month)

    statistics, bar_chart, pie_chart = await asyncio.gather(
        run_in_threadpool(run, get_statistics),
        run_in_threadpool(run, get_price_histogram),
        run_in_threadpool(run, get_category_breakdown),
    )
    logger.debug("Combined report built for %s", month)
    return {"statistics": statistics, "barChart": bar_chart, "pieChart": pie_chart}
