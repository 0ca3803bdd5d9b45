"""Unit tests for the cross-process ledger append lock"""

from types import SimpleNamespace

from petty_cash.infrastructure.database.repositories import LEDGER_LOCK_KEY, TransactionRepository


class RecordingSession:
    """Stands in for a Session bound to a given dialect"""

    def __init__(self, dialect: str):
        self.bind = SimpleNamespace(dialect=SimpleNamespace(name=dialect))
        self.statements = []

    def get_bind(self):
        return self.bind

    def execute(self, statement, params=None):
        self.statements.append((str(statement), params))


def test_postgres_takes_transaction_scoped_advisory_lock():
    session = RecordingSession("postgresql")

    TransactionRepository(session).lock_ledger()

    assert session.statements == [("SELECT pg_advisory_xact_lock(:key)", {"key": LEDGER_LOCK_KEY})]


def test_other_dialects_rely_on_row_locks():
    session = RecordingSession("sqlite")

    TransactionRepository(session).lock_ledger()

    assert session.statements == []
