"""Pydantic schemas used across the project."""
from datetime import datetime
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, RootModel


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class TokenData(BaseModel):
    account_id: str
    username: str
    role: str


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6)


class AdminLoginRequest(LoginRequest):
    pass


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6)
    email: Optional[str] = None


class AccountLoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    account_id: str
    username: str
    role: str
    is_super_admin: bool = False


class AccountCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6)
    email: Optional[str] = None
    role: str = "user"


class AccountResponse(BaseModel):
    id: str
    username: str
    email: Optional[str] = None
    role: str
    is_active: bool
    is_verified: bool = False
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AccountUpdate(BaseModel):
    email: Optional[str] = None
    is_active: Optional[bool] = None
    role: Optional[str] = None
    password: Optional[str] = Field(None, min_length=6)


class SuccessResponse(BaseModel):
    success: bool = True
    message: str = "ok"
    data: Optional[Any] = None


class WalletResponse(BaseModel):
    account_id: str
    balance_cents: int
    currency: str
    is_frozen: bool
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TransactionResponse(BaseModel):
    id: str
    account_id: str
    amount_cents: int
    currency: str
    type: str
    name: str
    category: Optional[str] = None
    status: str
    note: Optional[str] = None
    transfer_id: Optional[str] = None
    counterparty_id: Optional[str] = None
    owner_username: Optional[str] = None
    owner_email: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TransactionListResponse(BaseModel):
    total: int
    transactions: list[TransactionResponse] = Field(default_factory=list)


class SendMoneyRequest(BaseModel):
    recipient: str = Field(..., min_length=1, description="Recipient username or email")
    amount_cents: int = Field(..., gt=0)
    note: Optional[str] = Field(None, max_length=255)


class TransferResponse(BaseModel):
    id: str
    sender_id: str
    recipient_id: str
    amount_cents: int
    currency: str
    status: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    settled_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SendMoneyResponse(BaseModel):
    transfer: TransferResponse
    transaction_id: str
    balance_cents: int


class WalletTopupRequest(BaseModel):
    amount_cents: int = Field(..., gt=0)
    payment_channel: Optional[str] = None
    reference_no: Optional[str] = None


class WalletTopupResponse(BaseModel):
    id: str
    account_id: str
    amount_cents: int
    currency: str
    status: str
    payment_channel: Optional[str] = None
    reference_no: Optional[str] = None
    created_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TopupReviewRequest(BaseModel):
    decision: Literal["approve", "reject"]


class SettleTransactionRequest(BaseModel):
    """Body of the settle endpoint, keyed the way the admin console sends it."""

    transaction_id: str = Field(..., alias="transactionId", min_length=1)
    target_status: str = Field(..., alias="targetStatus")
    reason_note: Optional[str] = Field(None, alias="reasonNote")

    model_config = ConfigDict(populate_by_name=True)


class SettlementResponse(BaseModel):
    success: bool = True
    transaction_id: str
    status: str
    run_id: Optional[str] = None
    transfer_id: Optional[str] = None
    match_strategy: str
    credited_account_id: Optional[str] = None
    amount_cents: int
    notified: bool = False
    replayed: bool = False


class SettlementEventResponse(BaseModel):
    from_state: Optional[str] = None
    to_state: str
    detail: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SettlementRunResponse(BaseModel):
    id: str
    transaction_id: str
    target_status: str
    state: str
    transfer_id: Optional[str] = None
    match_strategy: Optional[str] = None
    actor_id: Optional[str] = None
    error: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    events: list[SettlementEventResponse] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class SettleTransactionCommand(BaseModel):
    action: Literal["settle_transaction"]
    transaction_id: str = Field(..., min_length=1)
    target_status: Literal["completed", "rejected"]
    reason_note: Optional[str] = None


class DeleteTransactionCommand(BaseModel):
    action: Literal["delete_transaction"]
    transaction_id: str = Field(..., min_length=1)


class FreezeWalletCommand(BaseModel):
    action: Literal["freeze_wallet"]
    account_id: str = Field(..., min_length=1)
    reason: Optional[str] = None


class UnfreezeWalletCommand(BaseModel):
    action: Literal["unfreeze_wallet"]
    account_id: str = Field(..., min_length=1)
    reason: Optional[str] = None


class AdjustBalanceCommand(BaseModel):
    action: Literal["adjust_balance"]
    account_id: str = Field(..., min_length=1)
    delta_cents: int = Field(..., description="Signed amount; negative values debit the wallet")
    reason: str = Field(..., min_length=1, max_length=255)


class VerifyAccountCommand(BaseModel):
    action: Literal["verify_account"]
    account_id: str = Field(..., min_length=1)


AdminCommandPayload = Annotated[
    Union[
        SettleTransactionCommand,
        DeleteTransactionCommand,
        FreezeWalletCommand,
        UnfreezeWalletCommand,
        AdjustBalanceCommand,
        VerifyAccountCommand,
    ],
    Field(discriminator="action"),
]


class AdminCommandRequest(RootModel[AdminCommandPayload]):
    """One admin command, selected by its ``action`` field."""


class AdminCommandResponse(BaseModel):
    success: bool = True
    action: str
    target_id: str
    data: dict[str, Any] = Field(default_factory=dict)


class ActivityLogResponse(BaseModel):
    id: int
    admin_id: Optional[str] = None
    action: str
    target_table: str
    target_id: str
    old_values: dict[str, Any] = Field(default_factory=dict)
    new_values: dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AdminStatsResponse(BaseModel):
    account_total: int = 0
    pending_transactions: int = 0
    completed_transactions: int = 0
    rejected_transactions: int = 0
    pending_transfers: int = 0
    pending_topups: int = 0
    total_balance_cents: int = 0
    failed_settlements: int = 0
