"""Order persistence models (SQLModel tables)"""

from datetime import datetime

from sqlmodel import Field, SQLModel


class OrderTable(SQLModel, table=True):
    """Order database table"""

    __tablename__ = "orders"

    id: str = Field(primary_key=True)
    side: str
    token_in: str
    token_out: str
    amount: float
    slippage: float
    status: str = Field(default="queued", index=True)
    attempt: int = 1
    last_error: str | None = None
    settlement_ref: str | None = None
    executed_price: float | None = None
    created_at: str = Field(default_factory=lambda: datetime.now().isoformat())
    updated_at: str = Field(default_factory=lambda: datetime.now().isoformat())
