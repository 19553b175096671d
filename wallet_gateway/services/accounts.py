"""Read-only lookups: bank accounts (with derived balances) and categories"""

from typing import Dict, List, Optional

from wallet_gateway.domain.accounts import compute_balances
from wallet_gateway.domain.exceptions import NotFoundError
from wallet_gateway.domain.models import AccountBalance, BankAccount, Category
from wallet_gateway.infrastructure.records import (
    BANK_ACCOUNTS,
    CATEGORIES,
    TRANSACTIONS,
    bank_account_from_record,
    category_from_record,
    to_store_type,
    transaction_from_record,
)
from wallet_gateway.infrastructure.store import PAGE_SIZE, Order, RecordStore, eq, select_all


class AccountService:
    def __init__(self, store: RecordStore, page_size: int = PAGE_SIZE):
        self.store = store
        self.page_size = page_size

    async def get_bank_account(self, user_id: str, account_id: str) -> BankAccount:
        rows = await self.store.select(
            BANK_ACCOUNTS,
            [eq("id", account_id), eq("user_id", user_id)],
            limit=1,
        )
        if not rows:
            raise NotFoundError(f"Bank account {account_id} not found")
        return bank_account_from_record(rows[0])

    async def list_balances(self, user_id: str) -> List[AccountBalance]:
        """Every account with its balance; transactions are read in full, page by page"""
        accounts = await select_all(
            self.store, BANK_ACCOUNTS, [eq("user_id", user_id)], Order("name"), self.page_size
        )
        transactions = await select_all(
            self.store, TRANSACTIONS, [eq("user_id", user_id)], Order("id"), self.page_size
        )
        return compute_balances(
            [bank_account_from_record(row) for row in accounts],
            [transaction_from_record(row) for row in transactions],
        )

    async def get_balance(self, user_id: str, account_id: str) -> AccountBalance:
        for balance in await self.list_balances(user_id):
            if balance.account.id == account_id:
                return balance
        raise NotFoundError(f"Bank account {account_id} not found")

    async def list_categories(self, user_id: str, type: Optional[str] = None) -> List[Category]:
        filters = [eq("user_id", user_id)]
        if type:
            filters.append(eq("type", to_store_type(type)))
        rows = await self.store.select(CATEGORIES, filters, Order("name"))
        return [category_from_record(row) for row in rows]

    async def category_names(self, user_id: str) -> Dict[str, str]:
        return {c.id: c.name for c in await self.list_categories(user_id)}
