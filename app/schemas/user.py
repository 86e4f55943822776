from pydantic import BaseModel, Field, ConfigDict
from typing import List, Literal, Optional
from datetime import datetime


class UserRegister(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(..., min_length=6)
    mobile: str = Field(..., pattern=r"^[0-9]{10}$")


class UserLogin(BaseModel):
    email: str
    password: str


class WalletTransactionResponse(BaseModel):
    type: str
    amount: float
    description: str
    order_id: Optional[int] = None
    timestamp: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    mobile: str
    role: str
    is_blocked: bool = False
    blocked_reason: Optional[str] = None
    wallet_balance: float
    wallet_transactions: List[WalletTransactionResponse] = []

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    token: str
    expires_at: datetime
    user: UserResponse


class BlockRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=255)


class RoleUpdateRequest(BaseModel):
    role: Literal["user", "admin", "manager"]


class UserActionResponse(BaseModel):
    message: str
    user: UserResponse
