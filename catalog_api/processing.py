# catalog_api/processing.py
import json
import logging
from pathlib import Path

import pandas as pd
import requests
from sqlalchemy import delete, insert
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .errors import IngestionError, StoreError
from .models import Transaction

logger = logging.getLogger(__name__)

SEED_FIELDS = ["id", "title", "price", "description", "category", "image", "sold", "dateOfSale"]


def fetch_seed_data(source_url: str, timeout: float = 30.0) -> list:
    """
    Downloads the seed document and returns its top-level array.

    Args:
        source_url: HTTP(S) URL of the JSON document, or a local file path
        timeout: Seconds to wait for the upstream server

    Raises:
        IngestionError: If the document cannot be fetched, is not JSON,
            or is not a JSON array
    """
    if source_url.startswith(("http://", "https://")):
        try:
            response = requests.get(source_url, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise IngestionError(f"Failed to fetch seed data: {e}") from e
        body = response.text
    else:
        try:
            body = Path(source_url).read_text(encoding="utf-8")
        except OSError as e:
            raise IngestionError(f"Failed to read seed data: {e}") from e

    try:
        payload = json.loads(body)
    except ValueError as e:
        raise IngestionError(f"Seed data is not valid JSON: {e}") from e

    if not isinstance(payload, list):
        raise IngestionError(f"Seed data must be a JSON array, got {type(payload).__name__}")
    return payload


def _optional_text(value):
    return value if isinstance(value, str) else None


def normalize_records(items: list) -> list:
    """
    Cleans raw seed entries into rows for the transactions table.

    Entries with an unparseable dateOfSale, a bad id, title, price or sold
    flag are dropped and logged. Dates are normalized to naive UTC. Only the
    first entry is kept for a repeated id.

    Returns:
        list[dict]: Rows keyed by Transaction column names
    """
    rows = [item for item in items if isinstance(item, dict)]
    if len(rows) < len(items):
        logger.warning("Dropping %d seed entries that are not JSON objects", len(items) - len(rows))
    if not rows:
        return []

    df = pd.DataFrame(rows).reindex(columns=SEED_FIELDS)

    raw_dates = df["dateOfSale"]
    dates = pd.to_datetime(raw_dates, errors="coerce", utc=True, format="mixed")
    ids = pd.to_numeric(df["id"], errors="coerce")
    prices = pd.to_numeric(df["price"], errors="coerce")

    checks = {
        "invalid dateOfSale": dates.isna(),
        "missing or non-integer id": ids.isna() | (ids % 1 != 0),
        "missing title": ~df["title"].map(lambda v: isinstance(v, str) and bool(v.strip())).astype(bool),
        "missing or negative price": prices.isna() | (prices < 0) | (prices == float("inf")),
        "non-boolean sold": ~df["sold"].map(pd.api.types.is_bool).astype(bool),
    }

    keep = pd.Series(True, index=df.index)
    for reason, failed in checks.items():
        for idx in df.index[keep & failed]:
            logger.warning(
                "Skipping seed entry id=%r: %s (dateOfSale=%r)",
                df.at[idx, "id"], reason, raw_dates.at[idx],
            )
        keep &= ~failed

    # First occurrence wins for a repeated id
    duplicated = ids.where(keep).duplicated(keep="first") & keep
    for idx in df.index[duplicated]:
        logger.warning("Skipping duplicate seed entry id=%r", df.at[idx, "id"])
    keep &= ~duplicated

    utc_dates = dates.dt.tz_convert(None)
    records = []
    for idx in df.index[keep]:
        records.append({
            "external_id": int(ids.at[idx]),
            "title": df.at[idx, "title"],
            "price": float(prices.at[idx]),
            "description": _optional_text(df.at[idx, "description"]),
            "category": _optional_text(df.at[idx, "category"]),
            "image": _optional_text(df.at[idx, "image"]),
            "sold": bool(df.at[idx, "sold"]),
            "date_of_sale": utc_dates.at[idx].to_pydatetime(),
        })
    return records


def replace_transactions(engine: Engine, records: list) -> int:
    """
    Replaces the whole transactions table with the given rows.

    The delete and the insert share one database transaction, so readers
    never see an empty table and a failed insert keeps the old rows.

    Raises:
        StoreError: If the database rejects either statement
    """
    try:
        with engine.begin() as connection:
            connection.execute(delete(Transaction))
            if records:
                connection.execute(insert(Transaction), records)
    except SQLAlchemyError as e:
        raise StoreError(f"Failed to replace transactions: {e}") from e
    return len(records)


def seed_transactions(engine: Engine, source_url: str, timeout: float = 30.0) -> int:
    """
    Fetches the seed document and replaces the store's contents with it.

    Returns:
        int: Number of transactions stored
    """
    logger.info("Fetching seed data from %s", source_url)
    items = fetch_seed_data(source_url, timeout=timeout)
    records = normalize_records(items)
    count = replace_transactions(engine, records)
    logger.info("Stored %d of %d seed entries", count, len(items))
    return count
