"""Concurrent borrow and return against a shared ledger."""

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace

import pytest

from libraryloans.catalog.manager import CatalogManager
from libraryloans.catalog.schemas import BookCreate
from libraryloans.db.sqlite import Database
from libraryloans.errors import AlreadyReturned, LoanLimitExceeded, OutOfStock
from libraryloans.ledger.manager import LoanLedger
from libraryloans.membership.manager import MembershipManager
from libraryloans.membership.schemas import UserCreate


@pytest.fixture(params=["file", "memory"])
def shared_db(request, temp_db_path):
    """The same tests run on a file database and a shared in-memory one."""
    path = str(temp_db_path) if request.param == "file" else ":memory:"
    database = Database(path)
    database.create_tables()
    yield database
    database.engine.dispose()


@pytest.fixture
def setup(shared_db, config):
    catalog = CatalogManager(shared_db)
    membership = MembershipManager(shared_db)
    ledger = LoanLedger(shared_db, catalog=catalog, membership=membership, config=config)
    users = [
        membership.register_user(UserCreate(name=f"User {i}", email=f"user{i}@example.com")).id
        for i in range(20)
    ]
    return catalog, ledger, users


def run_concurrently(fn, args_list, workers=20):
    """Start every call at once and collect (result, error) pairs."""
    barrier = threading.Barrier(len(args_list))

    def call(args):
        barrier.wait()
        try:
            return fn(*args), None
        except Exception as e:
            return None, e

    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(call, args_list))


class TestConcurrentBorrow:
    """N borrowers racing for K copies."""

    @pytest.mark.parametrize("copies", [0, 1, 5])
    def test_exactly_k_succeed(self, setup, copies):
        catalog, ledger, users = setup
        catalog.add_book(BookCreate(id="hot", title="Hot Title", author="A", available=copies))

        outcomes = run_concurrently(ledger.borrow, [(u, "hot") for u in users])

        succeeded = [r for r, e in outcomes if e is None]
        failed = [e for r, e in outcomes if e is not None]
        assert len(succeeded) == copies
        assert len(set(succeeded)) == copies
        assert len(failed) == len(users) - copies
        assert all(isinstance(e, OutOfStock) for e in failed)
        assert catalog.get_availability("hot") == 0

    def test_different_books_all_succeed(self, setup):
        catalog, ledger, users = setup
        for i in range(len(users)):
            catalog.add_book(BookCreate(id=f"b{i}", title=f"Book {i}", author="A", available=1))

        outcomes = run_concurrently(
            ledger.borrow, [(u, f"b{i}") for i, u in enumerate(users)]
        )

        assert all(e is None for _, e in outcomes)
        assert all(catalog.get_availability(f"b{i}") == 0 for i in range(len(users)))


    def test_loan_limit_holds_across_books(self, setup, shared_db, config):
        catalog, _, users = setup
        ledger = LoanLedger(shared_db, catalog=catalog, config=replace(config, max_active_loans=2))
        for i in range(10):
            catalog.add_book(BookCreate(id=f"l{i}", title=f"Limited {i}", author="A", available=1))

        outcomes = run_concurrently(ledger.borrow, [(users[0], f"l{i}") for i in range(10)])

        failed = [e for _, e in outcomes if e is not None]
        assert sum(1 for _, e in outcomes if e is None) == 2
        assert len(failed) == 8
        assert all(isinstance(e, LoanLimitExceeded) for e in failed)
        assert len(ledger.list_loans_for_user(users[0])) == 2
        assert sum(catalog.get_availability(f"l{i}") for i in range(10)) == 8


class TestConcurrentReturn:
    """Many callers returning the same loan."""

    def test_returned_once(self, setup):
        catalog, ledger, users = setup
        catalog.add_book(BookCreate(id="r", title="Return Me", author="A", available=1))
        loan_id = ledger.borrow(users[0], "r")

        outcomes = run_concurrently(ledger.return_loan, [(loan_id,)] * 10, workers=10)

        errors = [e for _, e in outcomes if e is not None]
        assert len(errors) == 9
        assert all(isinstance(e, AlreadyReturned) for e in errors)
        assert catalog.get_availability("r") == 1

    def test_borrow_and_return_interleaved(self, setup):
        catalog, ledger, users = setup
        catalog.add_book(BookCreate(id="mix", title="Busy Book", author="A", available=3))
        loan_ids = [ledger.borrow(u, "mix") for u in users[:3]]

        calls = [(ledger.return_loan, (loan_id,)) for loan_id in loan_ids]
        calls += [(ledger.borrow, (u, "mix")) for u in users[3:13]]
        outcomes = run_concurrently(lambda fn, args: fn(*args), calls)

        borrows_ok = sum(1 for (fn, _), (_, e) in zip(calls, outcomes) if fn == ledger.borrow and e is None)
        assert all(e is None for (fn, _), (_, e) in zip(calls, outcomes) if fn == ledger.return_loan)
        assert 0 <= borrows_ok <= 3
        assert catalog.get_availability("mix") == 3 - borrows_ok
