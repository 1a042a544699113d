import pytest
from datetime import datetime, timedelta, timezone
from sqlalchemy import func, select
from lendbook.core.authz import Identity
from lendbook.core.lending import LendingCommandHandler
from lendbook.core.models import Item, Loan, Role, User
from lendbook.core.queries import LoanQueryService
from lendbook.core.store import SQLAlchemyLendingStore


class FakeClock:
    """Each call is one minute later than the previous one."""

    def __init__(self, start=datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self):
        self.now += timedelta(minutes=1)
        return self.now


@pytest.fixture
def store(tmp_path):
    # File backed so that every thread gets its own connection
    store = SQLAlchemyLendingStore.from_uri(
        f"sqlite:///{tmp_path / 'lendbook.db'}", timeout=30, echo=False)
    store.init()
    yield store
    store.engine.dispose()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def lending(store, clock):
    return LendingCommandHandler(store, clock=clock)


@pytest.fixture
def queries(store):
    return LoanQueryService(store)


def _add_user(store, name, role=Role.USER):
    with store.transaction() as session:
        user = User(name=name, email=f"{name.lower()}@example.org", role=role)
        session.add(user)
        session.flush()
        return Identity(id=user.id, name=user.name, role=user.role)


@pytest.fixture
def alice(store):
    return _add_user(store, "Alice")


@pytest.fixture
def bob(store):
    return _add_user(store, "Bob")


@pytest.fixture
def admin(store):
    return _add_user(store, "Root", role=Role.ADMIN)


@pytest.fixture
def add_item(store, alice):
    def _add_item(title="Dune", author="Frank Herbert", isbn="9780441013593"):
        with store.transaction() as session:
            item = Item(title=title, author=author, isbn=isbn, owner_id=alice.id)
            session.add(item)
            session.flush()
            return item.id
    return _add_item


@pytest.fixture
def item_id(add_item):
    return add_item()


@pytest.fixture
def active_loan_counts(store):
    """Returns {item_id: number of unreturned loans}."""
    def _counts():
        with store.reader() as session:
            rows = session.execute(
                select(Loan.item_id, func.count(Loan.id))
                .where(Loan.returned_at.is_(None))
                .group_by(Loan.item_id)
            ).all()
            return dict(rows)
    return _counts
