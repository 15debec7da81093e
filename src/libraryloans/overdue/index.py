"""Ordered access path for overdue-loan retrieval.

The ``loans`` table carries a B-tree index on ``due_date``
(``ix_loans_due_date``). SQLite keeps it current on every committed insert
or update, so a range scan over it always sees the latest committed ledger
state. The index only lowers retrieval cost: ``scan_before`` walks every
row and yields the same ids.
"""

from datetime import date
from typing import Optional

from sqlalchemy import select, text
from sqlalchemy.orm import Session

from ..db.sqlite import Database, get_db
from ..ledger.models import Loan, is_overdue
from ..ledger.schemas import LoanStatus

INDEX_NAME = "ix_loans_due_date"


class OverdueIndex:
    """Range queries over open loans keyed by due date."""

    def __init__(self, db: Optional[Database] = None):
        self.db = db or get_db()

    def _range_stmt(self, cutoff: date):
        return (
            select(Loan.id)
            .where(
                Loan.due_date < cutoff.isoformat(),
                Loan.status.in_(LoanStatus.open_values()),
            )
            .order_by(Loan.due_date, Loan.id)
        )

    def range_before(self, cutoff: date, session: Optional[Session] = None) -> list[int]:
        """Ids of open loans due strictly before ``cutoff``.

        Args:
            cutoff: Exclusive upper bound on the due date
            session: Run inside an existing session

        Returns:
            Loan ids ordered by due date, then id
        """

        def _range(s: Session) -> list[int]:
            return list(s.execute(self._range_stmt(cutoff)).scalars().all())

        if session:
            return _range(session)
        with self.db.get_session() as s:
            return _range(s)

    def scan_before(self, cutoff: date) -> list[int]:
        """Same result as ``range_before``, computed from a full table scan."""
        with self.db.get_session() as session:
            rows = session.execute(
                select(Loan.id, Loan.status, Loan.due_date)
            ).all()

        hits = [row for row in rows if is_overdue(row.status, row.due_date, cutoff)]
        hits.sort(key=lambda row: (row.due_date, row.id))
        return [row.id for row in hits]

    def query_plan(self, cutoff: date) -> list[str]:
        """SQLite ``EXPLAIN QUERY PLAN`` detail lines for the range query."""
        compiled = self._range_stmt(cutoff).compile(
            self.db.engine, compile_kwargs={"literal_binds": True}
        )
        with self.db.get_session() as session:
            rows = session.execute(text(f"EXPLAIN QUERY PLAN {compiled}")).all()
        # Columns are (id, parent, notused, detail)
        return [row[-1] for row in rows]

    def uses_index(self, cutoff: Optional[date] = None) -> bool:
        """Check that the range query is answered from the due-date index."""
        plan = self.query_plan(cutoff or date.today())
        return any(INDEX_NAME in line for line in plan)
