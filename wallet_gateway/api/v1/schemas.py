"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from wallet_gateway.domain import recurring
from wallet_gateway.domain.debts import compute_current_amount, compute_progress, days_until_due
from wallet_gateway.domain.models import (
    AccountBalance,
    Category,
    Debt,
    DebtSummary,
    GoalContribution,
    GoalStatus,
    RecurringTransaction,
    Transaction,
    Transfer,
)

TransactionType = Literal["income", "expense"]


# ---------- Debts ----------


class DebtCreateRequest(BaseModel):
    """Request body for POST /v1/debts"""

    user_id: str = Field(..., min_length=1, description="Owner identifier")
    name: str = Field(..., min_length=1)
    original_amount: Decimal = Field(..., ge=0)
    monthly_interest_rate: Optional[Decimal] = Field(None, ge=0, description="Percent per 30-day period")
    due_date: Optional[date] = None
    creditor: Optional[str] = None
    description: Optional[str] = None


class DebtUpdateRequest(BaseModel):
    """Request body for PATCH /v1/debts/{debt_id}; amounts are not editable"""

    user_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    monthly_interest_rate: Optional[Decimal] = Field(None, ge=0)
    due_date: Optional[date] = None
    creditor: Optional[str] = None
    description: Optional[str] = None


class PaymentRequest(BaseModel):
    """Request body for POST /v1/debts/{debt_id}/payments"""

    user_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., description="Amount paid; must be > 0 and <= amount owed")
    bank_account_id: Optional[str] = None
    description: Optional[str] = None


class DebtSchema(BaseModel):
    id: str
    name: str
    original_amount: float
    current_amount: float
    amount_owed: float
    progress_percent: float
    monthly_interest_rate: Optional[float] = None
    due_date: Optional[date] = None
    days_until_due: Optional[int] = None
    last_payment_date: Optional[datetime] = None
    creditor: Optional[str] = None
    description: Optional[str] = None
    settled: bool

    @classmethod
    def from_domain(cls, debt: Debt, now: datetime) -> "DebtSchema":
        return cls(
            id=debt.id,
            name=debt.name,
            original_amount=float(debt.original_amount),
            current_amount=float(debt.current_amount),
            amount_owed=float(compute_current_amount(debt, now)),
            progress_percent=round(compute_progress(debt, now), 1),
            monthly_interest_rate=None if debt.monthly_interest_rate is None else float(debt.monthly_interest_rate),
            due_date=debt.due_date,
            days_until_due=days_until_due(debt, now.date()),
            last_payment_date=debt.last_payment_date,
            creditor=debt.creditor,
            description=debt.description,
            settled=debt.is_settled,
        )


class DebtSummarySchema(BaseModel):
    total_original: float
    total_current: float
    total_paid: float
    debt_count: int

    @classmethod
    def from_domain(cls, summary: DebtSummary) -> "DebtSummarySchema":
        return cls(
            total_original=float(summary.total_original),
            total_current=float(summary.total_current),
            total_paid=float(summary.total_paid),
            debt_count=summary.debt_count,
        )


class DebtListResponse(BaseModel):
    """Response for GET /v1/debts"""

    user_id: str
    debts: List[DebtSchema]
    summary: DebtSummarySchema


class TransactionSchema(BaseModel):
    id: Optional[str] = None
    type: TransactionType
    value: float
    description: str
    transaction_date: date
    bank_account_id: str
    category_id: Optional[str] = None

    @classmethod
    def from_domain(cls, transaction: Transaction) -> "TransactionSchema":
        return cls(
            id=transaction.id,
            type=transaction.type,
            value=float(transaction.value),
            description=transaction.description,
            transaction_date=transaction.transaction_date,
            bank_account_id=transaction.bank_account_id,
            category_id=transaction.category_id,
        )


class PaymentResponse(BaseModel):
    """Response for POST /v1/debts/{debt_id}/payments"""

    debt_id: str
    amount_paid: float
    amount_before: float
    new_current_amount: float
    last_payment_date: datetime
    transaction: TransactionSchema


# ---------- Recurring transactions ----------


class RecurringRequest(BaseModel):
    """Request body for creating or editing a recurring transaction"""

    user_id: str = Field(..., min_length=1)
    type: TransactionType
    value: Decimal = Field(..., gt=0)
    description: str = Field(..., min_length=1)
    frequency: str = Field("monthly", description="daily | weekly | monthly | yearly")
    start_date: date
    end_date: Optional[date] = None
    bank_account_id: str = Field(..., min_length=1)
    category_id: Optional[str] = None


class RecurringSchema(BaseModel):
    id: str
    type: TransactionType
    value: float
    description: str
    frequency: str
    start_date: date
    end_date: Optional[date] = None
    next_occurrence_date: date
    bank_account_id: str
    category_id: Optional[str] = None
    active: bool
    days_until_next: int
    overdue: bool

    @classmethod
    def from_domain(cls, series: RecurringTransaction, today: date) -> "RecurringSchema":
        return cls(
            id=series.id,
            type=series.type,
            value=float(series.value),
            description=series.description,
            frequency=series.frequency,
            start_date=series.start_date,
            end_date=series.end_date,
            next_occurrence_date=series.next_occurrence_date,
            bank_account_id=series.bank_account_id,
            category_id=series.category_id,
            active=recurring.is_active(series.end_date, today),
            days_until_next=recurring.days_until_next(series, today),
            overdue=recurring.is_overdue(series, today),
        )


class RecurringListResponse(BaseModel):
    """Response for GET /v1/recurring-transactions"""

    user_id: str
    active: List[RecurringSchema]
    inactive: List[RecurringSchema]


class FiredResponse(BaseModel):
    """Response for create / execute: the series and the transaction it produced, if any"""

    recurring_transaction: RecurringSchema
    transaction: Optional[TransactionSchema] = None


class UserScopedRequest(BaseModel):
    """Body for state transitions that need nothing but the owner"""

    user_id: str = Field(..., min_length=1)


# ---------- Lookups ----------


class BankAccountSchema(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    initial_balance: float
    current_balance: float
    transaction_count: int

    @classmethod
    def from_domain(cls, balance: AccountBalance) -> "BankAccountSchema":
        return cls(
            id=balance.account.id,
            name=balance.account.name,
            description=balance.account.description,
            initial_balance=float(balance.account.initial_balance),
            current_balance=float(balance.current_balance),
            transaction_count=balance.transaction_count,
        )


class BankAccountListResponse(BaseModel):
    user_id: str
    accounts: List[BankAccountSchema]


class CategorySchema(BaseModel):
    id: str
    name: str
    type: str

    @classmethod
    def from_domain(cls, category: Category) -> "CategorySchema":
        return cls(id=category.id, name=category.name, type=category.type)


class CategoryListResponse(BaseModel):
    user_id: str
    categories: List[CategorySchema]


# ---------- Transactions ----------


class TransactionRequest(BaseModel):
    """Request body for creating or editing a transaction"""

    user_id: str = Field(..., min_length=1)
    type: TransactionType
    value: Decimal = Field(..., gt=0)
    transaction_date: date
    bank_account_id: str = Field(..., min_length=1)
    description: Optional[str] = None
    category_id: Optional[str] = None


class TransactionListResponse(BaseModel):
    """Response for GET /v1/transactions"""

    user_id: str
    month: Optional[str] = None
    transactions: List[TransactionSchema]
    total_income: float
    total_expense: float

    @classmethod
    def from_domain(cls, user_id: str, month: Optional[str], transactions: List[Transaction]) -> "TransactionListResponse":
        return cls(
            user_id=user_id,
            month=month,
            transactions=[TransactionSchema.from_domain(t) for t in transactions],
            total_income=float(sum((t.value for t in transactions if t.type == "income"), Decimal(0))),
            total_expense=float(sum((t.value for t in transactions if t.type == "expense"), Decimal(0))),
        )


class TransferRequest(BaseModel):
    """Request body for POST /v1/bank-accounts/transfers"""

    user_id: str = Field(..., min_length=1)
    from_account_id: str = Field(..., min_length=1)
    to_account_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., description="Must be > 0 and <= the source account balance")
    description: Optional[str] = None


class TransferResponse(BaseModel):
    expense: TransactionSchema
    income: TransactionSchema

    @classmethod
    def from_domain(cls, transfer: Transfer) -> "TransferResponse":
        return cls(
            expense=TransactionSchema.from_domain(transfer.expense),
            income=TransactionSchema.from_domain(transfer.income),
        )


# ---------- Goals ----------


class GoalRequest(BaseModel):
    """Request body for creating or editing a financial goal"""

    user_id: str = Field(..., min_length=1)
    type: TransactionType
    target_value: Decimal = Field(..., gt=0)
    start_period: date
    end_period: date
    category_id: Optional[str] = None


class GoalSchema(BaseModel):
    id: str
    type: TransactionType
    target_value: float
    start_period: date
    end_period: date
    category_id: Optional[str] = None
    current_value: float
    progress_percent: float
    remaining_days: int
    completed: bool

    @classmethod
    def from_domain(cls, status: GoalStatus) -> "GoalSchema":
        goal = status.goal
        return cls(
            id=goal.id,
            type=goal.type,
            target_value=float(goal.target_value),
            start_period=goal.start_period,
            end_period=goal.end_period,
            category_id=goal.category_id,
            current_value=float(status.current_value),
            progress_percent=round(status.progress_percent, 1),
            remaining_days=status.remaining_days,
            completed=status.is_completed,
        )


class GoalListResponse(BaseModel):
    """Response for GET /v1/goals, split by goal type"""

    user_id: str
    income: List[GoalSchema]
    expense: List[GoalSchema]


class ContributionRequest(BaseModel):
    """Request body for POST /v1/goals/{goal_id}/progress"""

    user_id: str = Field(..., min_length=1)
    value: Decimal
    progress_date: date
    description: Optional[str] = None


class ContributionSchema(BaseModel):
    id: Optional[str] = None
    value: float
    progress_date: date
    description: Optional[str] = None

    @classmethod
    def from_domain(cls, contribution: GoalContribution) -> "ContributionSchema":
        return cls(
            id=contribution.id,
            value=float(contribution.value),
            progress_date=contribution.progress_date,
            description=contribution.description,
        )


class ContributionResponse(BaseModel):
    contribution: ContributionSchema
    merged: bool
    goal: GoalSchema


class ContributionListResponse(BaseModel):
    goal_id: str
    contributions: List[ContributionSchema]
