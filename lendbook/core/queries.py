from lendbook.core.exceptions import ItemNotFoundError


class LoanQueryService:
    """Read views over loans, each ordered by `borrowed_at` ascending."""

    def __init__(self, store):
        self.store = store

    def all_active_loans(self):
        with self.store.reader() as session:
            return self.store.find_loans(session, active=True)

    def active_loans_for(self, holder_id: str):
        with self.store.reader() as session:
            return self.store.find_loans(session, active=True, holder_id=holder_id)

    def history_for(self, item_id: str):
        """Every loan of the item, returned or not; the latest one is last."""
        with self.store.reader() as session:
            if not self.store.get_item(session, item_id):
                raise ItemNotFoundError(f"Item '{item_id}' not found.")
            return self.store.find_loans(session, item_id=item_id)
