"""SQLModel implementation of the Transaction repository."""

from __future__ import annotations

from typing import Callable, Optional

from sqlmodel import Session, select

from ...models.transaction import Transaction
from ..database import storage_errors


class SQLModelTransactionRepository:
    """SQLModel-based transaction repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, transaction_id: int) -> Optional[Transaction]:
        """Retrieve a transaction by ID."""
        with storage_errors("get_transaction"), self.session_factory() as session:
            obj = session.get(Transaction, transaction_id)
            if obj:
                session.expunge(obj)
            return obj

    def list_for_envelope(self, line_id: int) -> list[Transaction]:
        """Get all transactions allocated to a line."""
        with storage_errors("list_for_envelope"), self.session_factory() as session:
            statement = (
                select(Transaction)
                .where(Transaction.envelope_line_id == line_id)
                .order_by(Transaction.id)  # type: ignore[arg-type]
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create(self, transaction: Transaction) -> Transaction:
        """Create a new transaction."""
        with storage_errors("create_transaction"), self.session_factory() as session:
            session.add(transaction)
            session.commit()
            session.refresh(transaction)
            session.expunge(transaction)
            return transaction

    def update(self, transaction: Transaction) -> Transaction:
        """Update an existing transaction."""
        with storage_errors("update_transaction"), self.session_factory() as session:
            transaction = session.merge(transaction)
            session.commit()
            session.refresh(transaction)
            session.expunge(transaction)
            return transaction

    def release_envelope(self, line_id: int) -> int:
        """Clear the envelope reference of every transaction allocated to ``line_id``."""
        with storage_errors("release_envelope"), self.session_factory() as session:
            rows = session.exec(
                select(Transaction).where(Transaction.envelope_line_id == line_id)
            ).all()
            for txn in rows:
                txn.envelope_line_id = None
                session.add(txn)
            session.commit()
            return len(rows)

    def delete(self, transaction_id: int) -> None:
        """Delete a transaction by ID."""
        with storage_errors("delete_transaction"), self.session_factory() as session:
            obj = session.get(Transaction, transaction_id)
            if obj:
                session.delete(obj)
                session.commit()
