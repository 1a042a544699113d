"""
    Checkout state of an item, derived from the loans table.

    An item is either Available or OnLoan to exactly one holder. The state
    is never stored; it is read from the single unreturned loan row (if any)
    inside whatever transaction the caller is running, so a write that
    follows the read sees the same state.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Available:
    item_id: str


@dataclass(frozen=True)
class OnLoan:
    item_id: str
    loan_id: str
    holder_id: str


def current_state(store, session, item_id):
    """Returns Available or OnLoan for `item_id` as seen by `session`."""
    loan = store.find_active_loan(session, item_id)
    if loan is None:
        return Available(item_id=item_id)
    return OnLoan(item_id=item_id, loan_id=loan.id, holder_id=loan.holder_id)
