#!/usr/bin/env python

"""
    Borrow and return for Lendbook.

    Both operations check state and write inside one store transaction, so
    concurrent borrows of the same item (or returns of the same loan)
    resolve to exactly one winner; the others get a ConflictError.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import logging
from datetime import datetime, timezone
from lendbook.core.authz import Action, permit
from lendbook.core.state import OnLoan, current_state
from lendbook.core.exceptions import (
    ItemNotFoundError,
    LoanNotFoundError,
    HolderNotFoundError,
    ItemUnavailableError,
    LoanAlreadyReturnedError,
    ForbiddenError,
)

logger = logging.getLogger(__name__)


def utcnow():
    return datetime.now(timezone.utc)


class LendingCommandHandler:

    def __init__(self, store, clock=None):
        self.store = store
        self.clock = clock or utcnow

    def borrow(self, identity, item_id: str, holder_id: str = None):
        """
        Lend an item to a holder.

        Args:
            identity: The authenticated caller.
            item_id: Item to lend.
            holder_id: Who the loan is made out to; defaults to the caller.
                Only administrators may name somebody else.

        Returns:
            LoanView of the new, active loan.

        Raises:
            ItemNotFoundError: If the item does not exist.
            ForbiddenError: If the caller may not borrow for `holder_id`.
            HolderNotFoundError: If an administrator names an unknown holder.
            ItemUnavailableError: If the item is already on loan.
        """
        holder_id = holder_id or identity.id
        with self.store.transaction() as session:
            # Locking the item row serializes concurrent borrows of it
            if not self.store.get_item(session, item_id, lock=True):
                raise ItemNotFoundError(f"Item '{item_id}' not found.")

            if not permit(identity, Action.BORROW, holder_id):
                logger.warning(
                    f"User {identity.id} may not borrow on behalf of {holder_id}")
                raise ForbiddenError("Not allowed to borrow for another holder.")

            if holder_id != identity.id and not self.store.get_user(session, holder_id):
                raise HolderNotFoundError(f"Holder '{holder_id}' not found.")

            state = current_state(self.store, session, item_id)
            if isinstance(state, OnLoan):
                logger.info(f"Item {item_id} unavailable, on loan as {state.loan_id}")
                raise ItemUnavailableError(f"Item '{item_id}' is already on loan.")

            loan = self.store.insert_loan(
                session, item_id, holder_id, borrowed_at=self.clock())
            view = self.store.loan_view(session, loan.id)

        logger.info(f"Item {item_id} lent to {holder_id} as loan {view.loan_id}")
        return view

    def return_loan(self, identity, loan_id: str):
        """
        Close an active loan.

        Raises:
            LoanNotFoundError: If the loan does not exist.
            LoanAlreadyReturnedError: If the loan was already returned.
            ForbiddenError: If the caller is neither the holder nor an admin.
        """
        with self.store.transaction() as session:
            loan = self.store.get_loan(session, loan_id, lock=True)
            if not loan:
                raise LoanNotFoundError(f"Loan '{loan_id}' not found.")

            if loan.returned_at is not None:
                raise LoanAlreadyReturnedError(
                    f"Loan '{loan_id}' was already returned.")

            if not permit(identity, Action.RETURN, loan.holder_id):
                logger.warning(f"User {identity.id} may not return loan {loan_id}")
                raise ForbiddenError("Only the holder or an administrator may return this loan.")

            if not self.store.mark_returned(session, loan_id, returned_at=self.clock()):
                # Another transaction closed it between our read and write
                raise LoanAlreadyReturnedError(
                    f"Loan '{loan_id}' was already returned.")
            view = self.store.loan_view(session, loan_id)

        logger.info(f"Loan {loan_id} returned by {identity.id}")
        return view
