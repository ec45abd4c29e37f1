# catalog_api/errors.py


class CatalogError(Exception):
    """Base class for errors reported to clients as {"error": message}."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidMonthError(CatalogError):
    status_code = 400


class IngestionError(CatalogError):
    """The seed document could not be fetched or was not a JSON array."""


class StoreError(CatalogError):
    """A collection operation failed in the database."""
