"""
In-memory repositories and an instrumented unlocker standing in for
PostgreSQL and real encrypted PDFs.
"""

from datetime import date, datetime
from decimal import Decimal

from app.errors import PersistenceFailure
from app.schemas.transactions import PersistedTransaction
from app.storage.base import CredentialRepository, StoredCredential, TransactionRepository

REFERENCE_DATE = date(2024, 3, 20)


class InMemoryCredentialRepository(CredentialRepository):

    def __init__(self):
        self.rows: dict[tuple[int, int], StoredCredential] = {}
        self.upsert_calls = 0

    async def list_for_user(self, user_id):
        return [c for (uid, _), c in sorted(self.rows.items()) if uid == user_id]

    async def upsert_many(self, user_id, entries):
        self.upsert_calls += 1
        now = datetime.now()
        for entry in entries:
            existing = self.rows.get((user_id, entry.priority))
            self.rows[(user_id, entry.priority)] = StoredCredential(
                priority=entry.priority,
                sealed_secret=entry.sealed_secret,
                label=entry.label,
                created_at=existing.created_at if existing else now,
                updated_at=now,
            )

    async def delete(self, user_id, priority):
        return self.rows.pop((user_id, priority), None) is not None


class InMemoryTransactionRepository(TransactionRepository):

    def __init__(self, existing=None, categories=None, fail=False):
        self.rows: list[PersistedTransaction] = list(existing or [])
        self.categories: dict[str, int] = dict(categories or {})
        self.fail = fail
        self.snapshot_calls = 0
        self.insert_calls = 0

    async def fetch_for_reconciliation(self, user_id):
        self.snapshot_calls += 1
        return [r for r in self.rows if r.user_id == user_id]

    async def category_ids_by_name(self, user_id, names):
        return {n: self.categories[n] for n in names if n in self.categories}

    async def insert_many(self, batch):
        self.insert_calls += 1
        if self.fail:
            raise PersistenceFailure("database unavailable")
        ids = []
        for item in batch:
            new_id = len(self.rows) + 1
            self.rows.append(PersistedTransaction(id=new_id, **item.model_dump()))
            ids.append(new_id)
        return ids


class FakeUnlocker:
    """
    Instrumented stand-in for PdfUnlocker.
    `locks` maps document bytes to the only password that opens them.
    Unlocking returns the bytes unchanged.
    """

    def __init__(self, locks=None):
        self.locks: dict[bytes, str] = dict(locks or {})
        self.attempts: list[str] = []

    def is_protected(self, data):
        return data in self.locks

    def opens_without_password(self, data):
        return data not in self.locks

    def try_unlock(self, data, password):
        self.attempts.append(password)
        if self.locks.get(data) == password:
            return data
        return None


def persisted(tx_id, tx_date, amount, description, user_id=1):
    return PersistedTransaction(
        id=tx_id,
        user_id=user_id,
        amount=Decimal(amount),
        type="expense",
        description=description,
        transaction_date=tx_date,
        source="manual",
    )


# ── Statement texts ─────────────────────────────────────────

CATHAY_STATEMENT = "\n".join([
    "國泰世華銀行 信用卡對帳單",
    "卡號末四碼：1234",
    "01/15 01/16 全家便利商店 85",
    "02/03 02/04 高鐵票 1,490",
    "03/01 03/02 Netflix 390",
])

CATHAY_EMPTY_STATEMENT = "\n".join([
    "國泰世華銀行 信用卡對帳單",
    "本期無消費明細",
])

TAISHIN_STATEMENT = "\n".join([
    "台新銀行 信用卡帳單",
    "2024/02/10 2024/02/11 誠品書店 560",
    "2024/02/18 2024/02/19 退款 誠品書店 -560",
])

FUBON_STATEMENT = "\n".join([
    "台北富邦銀行 信用卡帳單",
    "Card No. ****9876",
    "113/01/05 113/01/06 中油加油站 1,200",
    "02/14 02/15 餐廳 2,300",
])
