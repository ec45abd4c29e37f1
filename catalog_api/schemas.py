# catalog_api/schemas.py
from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

#for the api responses

class Message(BaseModel):
    message: str

class InitializeResult(BaseModel):
    message: str
    count: int

class TransactionOut(BaseModel):
    # FastAPI re-validates the dumped response, which uses the field names
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int = Field(validation_alias="external_id")
    title: str
    price: float
    description: Optional[str] = None
    category: Optional[str] = None
    image: Optional[str] = None
    sold: bool
    dateOfSale: datetime = Field(validation_alias="date_of_sale")

    @field_serializer("dateOfSale")
    def serialize_date_of_sale(self, value: datetime):
        # Stored as naive UTC
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat().replace("+00:00", "Z")

class TransactionPage(BaseModel):
    # Number of transactions on this page
    total: int
    transactions: List[TransactionOut]

class Statistics(BaseModel):
    totalSale: float
    soldItems: int
    notSoldItems: int

class CategoryCount(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    category: Optional[str] = Field(alias="_id")
    count: int

class CombinedReport(BaseModel):
    statistics: Statistics
    barChart: Dict[str, int]
    pieChart: List[CategoryCount]
