import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from storefront.domain.errors import BusinessError, ErrorKind, StoreUnavailable
from storefront.repos.cart_repo import CartRepo, UPSERT_ATTEMPTS

from conftest import USER, OTHER_USER


def test_upsert_creates_then_merges(db):
    repo = CartRepo(db)

    first = repo.upsert_line(USER, 10, 2)
    second = repo.upsert_line(USER, 10, 3)

    assert first.id == second.id
    assert second.quantity == 5
    assert len(repo.get_lines(USER)) == 1


def test_upsert_rejects_non_positive_delta(db):
    repo = CartRepo(db)

    result = repo.upsert_line(USER, 10, 0)

    assert isinstance(result, BusinessError)
    assert result.kind == ErrorKind.INVALID_QUANTITY
    assert repo.get_lines(USER) == []


def test_lines_are_per_user(db):
    repo = CartRepo(db)
    repo.upsert_line(USER, 10, 1)
    repo.upsert_line(OTHER_USER, 10, 4)

    assert repo.get_line(USER, 10).quantity == 1
    assert repo.get_line(OTHER_USER, 10).quantity == 4
    assert repo.get_line(USER, 11) is None


def test_get_lines_is_ordered_by_insertion(db):
    repo = CartRepo(db)
    for product_id in (30, 10, 20):
        repo.upsert_line(USER, product_id, 1)

    assert [line.product_id for line in repo.get_lines(USER)] == [30, 10, 20]


def test_set_quantity(db):
    repo = CartRepo(db)
    line = repo.upsert_line(USER, 10, 1)

    assert repo.set_quantity(USER, line.id, 7).quantity == 7

    assert repo.set_quantity(USER, line.id, 0).kind == ErrorKind.INVALID_QUANTITY
    assert repo.set_quantity(OTHER_USER, line.id, 3).kind == ErrorKind.NOT_FOUND
    assert repo.set_quantity(USER, 999, 3).kind == ErrorKind.NOT_FOUND
    assert repo.get_line(USER, 10).quantity == 7


def test_remove_line_is_idempotent(db):
    repo = CartRepo(db)
    line = repo.upsert_line(USER, 10, 1)

    repo.remove_line(line.id)
    repo.remove_line(line.id)
    repo.remove_line(12345)

    assert repo.get_lines(USER) == []


def test_clear_only_touches_one_user(db):
    repo = CartRepo(db)
    repo.upsert_line(USER, 10, 1)
    repo.upsert_line(USER, 11, 1)
    repo.upsert_line(OTHER_USER, 10, 1)

    assert repo.clear(USER) == 2
    assert repo.get_lines(USER) == []
    assert len(repo.get_lines(OTHER_USER)) == 1


def test_upsert_retries_after_concurrent_insert(db, monkeypatch):
    repo = CartRepo(db)
    real_commit = db.commit
    calls = []

    def racing_commit():
        calls.append(1)
        if len(calls) == 1:
            raise IntegrityError("INSERT INTO cart_lines", {}, Exception("UNIQUE constraint failed"))
        real_commit()

    monkeypatch.setattr(db, "commit", racing_commit)

    line = repo.upsert_line(USER, 10, 2)

    assert len(calls) == 2
    assert line.quantity == 2
    assert len(repo.get_lines(USER)) == 1


def test_upsert_gives_up_after_bounded_attempts(db, monkeypatch):
    repo = CartRepo(db)
    calls = []

    def always_conflicts():
        calls.append(1)
        raise IntegrityError("INSERT INTO cart_lines", {}, Exception("UNIQUE constraint failed"))

    monkeypatch.setattr(db, "commit", always_conflicts)

    with pytest.raises(StoreUnavailable):
        repo.upsert_line(USER, 10, 1)
    assert len(calls) == UPSERT_ATTEMPTS


def test_infrastructure_error_becomes_store_unavailable(db, monkeypatch):
    repo = CartRepo(db)

    def broken_commit():
        raise OperationalError("COMMIT", {}, Exception("database is locked"))

    monkeypatch.setattr(db, "commit", broken_commit)

    with pytest.raises(StoreUnavailable):
        repo.upsert_line(USER, 10, 1)


def test_release_lines_keeps_units_beyond_ordered(db):
    repo = CartRepo(db)
    exact = repo.upsert_line(USER, 10, 2)
    grown = repo.upsert_line(USER, 11, 1)
    repo.upsert_line(USER, 11, 3)
    foreign = repo.upsert_line(OTHER_USER, 12, 1)

    assert repo.release_lines(USER, {exact.id: 2, grown.id: 1, foreign.id: 1}) == 2
    repo.commit()
    db.expire_all()

    assert [(line.product_id, line.quantity) for line in repo.get_lines(USER)] == [(11, 3)]
    assert repo.get_line(OTHER_USER, 12).quantity == 1
