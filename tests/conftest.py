# tests/conftest.py
import pytest
import os
import shutil
import tempfile

# The app builds its own engine at import time; keep it off the dev database
TEST_DATA_DIR = tempfile.mkdtemp(prefix="catalog_api_tests_")
os.environ["SQLITE_PATH"] = os.path.join(TEST_DATA_DIR, "app.db")
os.environ.pop("DATABASE_URL", None)
os.environ.pop("POSTGRES_HOST", None)
os.environ["LOG_LEVEL"] = "WARNING"

from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

# Import app and global variables
from catalog_api.main import app, get_engine, get_db
from catalog_api.database import Base, build_engine
from catalog_api.processing import normalize_records, replace_transactions

# Seed entries shaped like the upstream document.
# February: ids 1, 2, 3, 5, 6, 7 (7 is February only once converted to UTC)
# March: id 4. Id 8 has a bad date and never gets stored.
SAMPLE_ITEMS = [
    {"id": 1, "title": "Widget", "price": 150, "description": "A useful widget",
     "category": "electronics", "image": "https://img.example/1.jpg", "sold": True,
     "dateOfSale": "2023-02-14T00:00:00Z"},
    {"id": 2, "title": "Blue Shirt", "price": 42, "description": "Cotton shirt",
     "category": "men's clothing", "image": "https://img.example/2.jpg", "sold": False,
     "dateOfSale": "2022-02-03T10:15:00Z"},
    {"id": 3, "title": "Gold Ring", "price": 100, "description": "18k gold",
     "category": "jewelery", "image": "https://img.example/3.jpg", "sold": True,
     "dateOfSale": "2021-02-20T08:00:00Z"},
    {"id": 4, "title": "Laptop", "price": 950, "description": "Fast laptop",
     "category": "electronics", "image": "https://img.example/4.jpg", "sold": True,
     "dateOfSale": "2022-03-05T12:00:00Z"},
    {"id": 5, "title": "Mystery Box", "price": 101, "description": None,
     "category": None, "image": None, "sold": False,
     "dateOfSale": "2022-02-11T09:30:00Z"},
    {"id": 6, "title": "Desk Lamp", "price": 420, "description": "Adjustable lamp",
     "category": "electronics", "image": "https://img.example/6.jpg", "sold": False,
     "dateOfSale": "2022-02-27T18:45:00Z"},
    {"id": 7, "title": "Late Parcel", "price": 10, "description": "Delivered late",
     "category": "jewelery", "image": "https://img.example/7.jpg", "sold": True,
     "dateOfSale": "2023-03-01T02:00:00+05:30"},
    {"id": 8, "title": "Broken Date", "price": 5, "description": "Never stored",
     "category": "electronics", "image": None, "sold": True,
     "dateOfSale": "not a date"},
]


@pytest.fixture(scope="session", autouse=True)
def cleanup_test_data_dir():
    yield
    # Runs after all tests are done
    shutil.rmtree(TEST_DATA_DIR, ignore_errors=True)

@pytest.fixture(scope="function")
def test_engine(tmp_path):
    """
    A fresh SQLite file per test, so threads in the combined endpoint each
    get their own connection.
    """
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()

@pytest.fixture(scope="function")
def db_session(test_engine):
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()

@pytest.fixture(scope="function")
def client(test_engine):
    """
    Overrides the dependency injection to use our test database.
    """
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

    def get_test_db_override():
        db = TestSessionLocal()
        try:
            yield db
        finally:
            db.close()

    def get_test_engine_override():
        yield test_engine

    app.dependency_overrides[get_db] = get_test_db_override
    app.dependency_overrides[get_engine] = get_test_engine_override

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()

@pytest.fixture(scope="function")
def seed_records(test_engine):
    """
    Returns a function that loads raw seed entries straight into the test database.
    """
    def _seed(items=None):
        records = normalize_records(SAMPLE_ITEMS if items is None else items)
        return replace_transactions(test_engine, records)

    return _seed

@pytest.fixture(scope="function")
def seeded(seed_records):
    return seed_records()
