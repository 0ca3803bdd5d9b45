"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class TransactionCreate(BaseModel):
    """Request body for POST /v1/transactions"""

    date: date
    description: str = Field(..., min_length=1)
    amount: Decimal = Field(..., description="Signed amount: negative for expenses")
    received_by: str = Field(..., min_length=1)
    payment_method: Literal["cash", "check", "card"]
    receipt_url: Optional[str] = None
    receipt_file_name: Optional[str] = None


class StatusUpdate(BaseModel):
    """Request body for PATCH .../{id}/status"""

    status: str = Field(..., description="approved | rejected")
    comments: Optional[str] = None


class TransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    date: date
    description: str
    amount: Decimal
    received_by: str
    payment_method: str
    receipt_url: Optional[str] = None
    receipt_file_name: Optional[str] = None
    status: str
    submitted_by: str
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    comments: Optional[str] = None
    running_balance: Optional[Decimal] = None
    ledger_sequence: Optional[int] = None
    created_at: datetime


class ReplenishmentCreate(BaseModel):
    """Request body for POST /v1/replenishments"""

    requested_amount: Decimal = Field(..., gt=0)
    reason: str = Field(..., min_length=1)


class ReplenishmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    requested_amount: Decimal
    reason: str
    status: str
    requested_by: str
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    comments: Optional[str] = None
    transaction_id: Optional[int] = None
    running_balance: Optional[Decimal] = None
    created_at: datetime


class StatsResponse(BaseModel):
    """Response for GET /v1/transactions/stats"""

    current_balance: Decimal
    monthly_total: Decimal
    pending_count: int
    average_transaction: Decimal
    total_transactions: int
    low_balance_threshold: Decimal
    is_low_balance: bool


class LedgerEntrySchema(BaseModel):
    entry_id: int
    sequence: int
    amount: Decimal
    running_balance: Decimal
    entry_date: Optional[date] = None


class MonthSummarySchema(BaseModel):
    expenses: Decimal
    replenishments: Decimal
    opening_float: Decimal


class LedgerResponse(BaseModel):
    """Response for GET /v1/ledger"""

    current_balance: Decimal
    entries: List[LedgerEntrySchema]
    month: MonthSummarySchema


class ReconciliationRequest(BaseModel):
    physical_count: Decimal


class ReconciliationResponse(BaseModel):
    current_balance: Decimal
    physical_count: Decimal
    variance: Decimal
    balanced: bool


class UserRegistration(BaseModel):
    """Request body for POST /v1/users; the id comes from the identity header"""

    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str


class RoleUpdate(BaseModel):
    role: str


class SettingUpdate(BaseModel):
    value: str


class SettingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    key: str
    value: str
    updated_by: str
    updated_at: datetime
