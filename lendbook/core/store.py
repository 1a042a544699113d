#!/usr/bin/env python

"""
    Storage for Lendbook loans.

    `LendingStore` is the interface the lending and query services are
    written against; `SQLAlchemyLendingStore` implements it on top of
    PostgreSQL or SQLite.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import abc
import logging
from contextlib import contextmanager
from typing import List, Optional
from sqlalchemy import select, update, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from lendbook.core import db
from lendbook.core.models import Item, Loan, User
from lendbook.core.exceptions import (
    LendbookError,
    ItemUnavailableError,
    StorageUnavailableError,
)
from lendbook.schemas.loan import LoanView

logger = logging.getLogger(__name__)


class LendingStore(abc.ABC):

    def init(self):
        """Prepares the backing storage; a no-op unless overridden."""
        return self

    @abc.abstractmethod
    def transaction(self):
        """Context manager yielding a session inside a write transaction.
        Leaving the block commits; any exception rolls back.
        """

    @abc.abstractmethod
    def reader(self):
        """Context manager yielding a session for read-only queries."""

    @abc.abstractmethod
    def get_item(self, session, item_id: str, lock: bool = False) -> Optional[Item]: ...

    @abc.abstractmethod
    def get_user(self, session, user_id: str) -> Optional[User]: ...

    @abc.abstractmethod
    def get_loan(self, session, loan_id: str, lock: bool = False) -> Optional[Loan]: ...

    @abc.abstractmethod
    def find_active_loan(self, session, item_id: str) -> Optional[Loan]: ...

    @abc.abstractmethod
    def insert_loan(self, session, item_id: str, holder_id: str, borrowed_at) -> Loan: ...

    @abc.abstractmethod
    def mark_returned(self, session, loan_id: str, returned_at) -> bool: ...

    @abc.abstractmethod
    def loan_view(self, session, loan_id: str) -> Optional[LoanView]: ...

    @abc.abstractmethod
    def find_loans(self, session, active: bool = False,
                   holder_id: Optional[str] = None,
                   item_id: Optional[str] = None) -> List[LoanView]: ...

    @abc.abstractmethod
    def check_db(self) -> bool: ...

    def item_exists(self, item_id: str) -> bool:
        with self.reader() as session:
            return self.get_item(session, item_id) is not None


class SQLAlchemyLendingStore(LendingStore):

    def __init__(self, engine):
        self.engine = engine
        self.Session = db.make_sessionmaker(engine)

    @classmethod
    def from_uri(cls, uri, **kwargs):
        return cls(db.make_engine(uri, **kwargs))

    def init(self):
        db.init(self.engine)
        return self

    @contextmanager
    def _session(self, read_only=False):
        session = self.Session()
        try:
            with session.begin():
                if read_only:
                    # Acquire the connection flagged so SQLite begins deferred
                    session.connection(execution_options={db.READ_ONLY: True})
                yield session
        except LendbookError:
            raise
        except SQLAlchemyError as e:
            logger.exception("Loan storage transaction failed")
            raise StorageUnavailableError(
                f"Storage unavailable: {e.__class__.__name__}") from e
        finally:
            session.close()

    def transaction(self):
        return self._session()

    def reader(self):
        return self._session(read_only=True)

    def get_item(self, session, item_id, lock=False):
        return session.get(Item, item_id, with_for_update=lock or None)

    def get_user(self, session, user_id):
        return session.get(User, user_id)

    def get_loan(self, session, loan_id, lock=False):
        return session.get(
            Loan, loan_id, with_for_update=lock or None,
            populate_existing=lock)

    def find_active_loan(self, session, item_id):
        return session.execute(
            select(Loan).where(
                Loan.item_id == item_id,
                Loan.returned_at.is_(None),
            )
        ).scalars().first()

    def insert_loan(self, session, item_id, holder_id, borrowed_at):
        loan = Loan(item_id=item_id, holder_id=holder_id, borrowed_at=borrowed_at)
        session.add(loan)
        try:
            session.flush()
        except IntegrityError as e:
            # uq_loans_active_item rejected a second unreturned loan
            raise ItemUnavailableError(
                f"Item '{item_id}' is already on loan.") from e
        return loan

    def mark_returned(self, session, loan_id, returned_at):
        result = session.execute(
            update(Loan)
            .where(Loan.id == loan_id, Loan.returned_at.is_(None))
            .values(returned_at=returned_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def _views(self):
        return (
            select(Loan, Item, User)
            .join(Item, Loan.item_id == Item.id)
            .join(User, Loan.holder_id == User.id)
            .execution_options(populate_existing=True)
        )

    def loan_view(self, session, loan_id):
        row = session.execute(self._views().where(Loan.id == loan_id)).first()
        return LoanView.from_row(*row) if row else None

    def find_loans(self, session, active=False, holder_id=None, item_id=None):
        stmt = self._views()
        if active:
            stmt = stmt.where(Loan.returned_at.is_(None))
        if holder_id is not None:
            stmt = stmt.where(Loan.holder_id == holder_id)
        if item_id is not None:
            stmt = stmt.where(Loan.item_id == item_id)
        stmt = stmt.order_by(Loan.borrowed_at.asc(), Loan.id.asc())
        return [LoanView.from_row(*row) for row in session.execute(stmt)]

    def check_db(self):
        try:
            with self.engine.connect().execution_options(**{db.READ_ONLY: True}) as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning(f"Database health check failed: {e}")
            return False
