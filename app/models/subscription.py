from sqlmodel import SQLModel, Field
from sqlalchemy import BigInteger, Column, Index, Integer
from typing import Optional
from uuid import UUID
from datetime import date

# BIGINT en Postgres; en SQLite solo INTEGER PRIMARY KEY genera el rowid
_ID_TYPE = BigInteger().with_variant(Integer(), "sqlite")


class Subscription(SQLModel, table=True):
    __tablename__ = "subscriptions"
    __table_args__ = (
        Index("ix_subscriptions_user_id_service_name", "user_id", "service_name"),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(_ID_TYPE, primary_key=True, autoincrement=True),
    )
    service_name: str = Field(nullable=False)
    price: int = Field(sa_column=Column(BigInteger, nullable=False))
    user_id: UUID = Field(nullable=False)
    start_date: date  # siempre día 1 del mes
    end_date: Optional[date] = None  # None = activa indefinidamente
