"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

INCOME = "income"
EXPENSE = "expense"

DAILY = "daily"
WEEKLY = "weekly"
MONTHLY = "monthly"
YEARLY = "yearly"
FREQUENCIES = (DAILY, WEEKLY, MONTHLY, YEARLY)


@dataclass
class Debt:
    """Money owed to a creditor, optionally accruing monthly interest"""

    id: str
    user_id: str
    name: str
    original_amount: Decimal
    current_amount: Decimal
    monthly_interest_rate: Optional[Decimal] = None  # percent per 30-day period
    due_date: Optional[date] = None
    last_payment_date: Optional[datetime] = None
    creditor: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_settled(self) -> bool:
        return self.current_amount <= 0


@dataclass
class RecurringTransaction:
    """Income or expense that repeats on a fixed cadence"""

    id: str
    user_id: str
    type: str  # "income" or "expense"
    value: Decimal
    description: str
    frequency: str
    start_date: date
    next_occurrence_date: date
    bank_account_id: str
    end_date: Optional[date] = None
    category_id: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class RecurringDefinition:
    """User-supplied fields of a recurring transaction (create or edit form)"""

    type: str
    value: Decimal
    description: str
    frequency: str
    start_date: date
    bank_account_id: str
    end_date: Optional[date] = None
    category_id: Optional[str] = None


@dataclass
class Transaction:
    """Concrete income/expense row; engines only ever append these"""

    user_id: str
    type: str
    value: Decimal
    description: str
    transaction_date: date
    bank_account_id: str
    category_id: Optional[str] = None
    id: Optional[str] = None


@dataclass
class BankAccount:
    id: str
    user_id: str
    name: str
    initial_balance: Decimal = Decimal("0")
    description: Optional[str] = None


@dataclass
class Category:
    id: str
    user_id: str
    name: str
    type: str


@dataclass
class PaymentResult:
    """Outcome of applying a payment to a debt"""

    transaction: Transaction
    amount_before: Decimal
    new_current_amount: Decimal
    last_payment_date: datetime


@dataclass
class DebtSummary:
    """Dashboard totals across all of a user's debts"""

    total_original: Decimal
    total_current: Decimal
    total_paid: Decimal
    debt_count: int


@dataclass
class Firing:
    """A recurring series fired: the row to insert and where the schedule moves next"""

    transaction: Optional[Transaction]
    next_occurrence_date: date


@dataclass
class AccountBalance:
    account: BankAccount
    current_balance: Decimal
    transaction_count: int = 0


@dataclass
class TransactionDefinition:
    """User-supplied fields of a transaction (create or edit form)"""

    type: str
    value: Decimal
    transaction_date: date
    bank_account_id: str
    description: Optional[str] = None
    category_id: Optional[str] = None


@dataclass
class Transfer:
    """Money moved between two of the user's accounts, recorded as a pair of rows"""

    expense: Transaction
    income: Transaction


@dataclass
class FinancialGoal:
    """Target amount of income to earn or expense to track within a period"""

    id: str
    user_id: str
    type: str
    target_value: Decimal
    start_period: date
    end_period: date
    category_id: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class GoalDefinition:
    type: str
    target_value: Decimal
    start_period: date
    end_period: date
    category_id: Optional[str] = None


@dataclass
class GoalContribution:
    """Amount recorded towards a goal; at most one row per goal and date"""

    user_id: str
    goal_id: str
    value: Decimal
    progress_date: date
    description: Optional[str] = None
    id: Optional[str] = None


@dataclass
class GoalStatus:
    goal: FinancialGoal
    current_value: Decimal
    progress_percent: float
    remaining_days: int
    is_completed: bool
