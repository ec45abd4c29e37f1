# catalog_api/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional

DEFAULT_SEED_SOURCE_URL = "https://s3.amazonaws.com/roxiler.com/product_transaction.json"

class Settings(BaseSettings):
    POSTGRES_USER: str = "user"
    POSTGRES_PASSWORD: str = "password"
    POSTGRES_DB: str = "transactions_db"
    POSTGRES_HOST: Optional[str] = None # Unset means fall back to SQLite
    POSTGRES_PORT: str = "5432"

    DATABASE_URL: Optional[str] = None
    SQLITE_PATH: str = "./transactions.db"

    SEED_SOURCE_URL: str = DEFAULT_SEED_SOURCE_URL
    SEED_TIMEOUT_SECONDS: float = 30.0

    CORS_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    def get_database_url(self):
        if self.DATABASE_URL:
            # For environments providing 'postgres://'
            if self.DATABASE_URL.startswith("postgres://"):
                return self.DATABASE_URL.replace("postgres://", "postgresql://", 1)
            return self.DATABASE_URL
        if self.POSTGRES_HOST:
            return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        return f"sqlite:///{self.SQLITE_PATH}"

settings = Settings()
