from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import date
from typing import Optional
from uuid import UUID

from app.utils.date_helpers import parse_month


class SubscriptionCreate(BaseModel):
    """Body for POST and PUT; dates arrive as MM-YYYY."""

    service_name: str = Field(min_length=1)
    price: int = Field(strict=True, ge=-(2**63), le=2**63 - 1)  # unidades menores (centavos)
    user_id: UUID
    start_date: date
    end_date: Optional[date] = None

    @field_validator("start_date", mode="before")
    @classmethod
    def parse_start_date(cls, v):
        return parse_month(v, "start_date")

    @field_validator("end_date", mode="before")
    @classmethod
    def parse_end_date(cls, v):
        # No se exige end_date >= start_date
        if v is None:
            return None
        return parse_month(v, "end_date")


class SubscriptionRead(BaseModel):
    id: int
    service_name: str
    price: int
    user_id: UUID
    start_date: date
    end_date: Optional[date] = None

    model_config = ConfigDict(from_attributes=True)


class SummaryPeriod(BaseModel):
    from_: str = Field(alias="from")
    to: str

    model_config = ConfigDict(populate_by_name=True)


class SubscriptionSummaryRead(BaseModel):
    total: int
    user_id: UUID
    service_name: str
    period: SummaryPeriod
