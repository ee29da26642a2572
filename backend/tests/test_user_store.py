import pytest

from usergate.core.database import make_engine, make_session_factory
from usergate.core.errors import (
    ConflictError,
    InfrastructureError,
    NotFoundError,
    StoreError,
    StoreErrorKind,
    from_store_error,
)
from usergate.models.user import Role
from usergate.services.user_store import UserStore


def test_create_and_find(store):
    u = store.create(email="a@x.com", password_hash="h", name="Ann")

    assert u.id
    assert u.role == "USER"
    assert u.created_at is not None and u.updated_at is not None

    assert store.find_by_email("a@x.com").id == u.id
    assert store.find_by_id(u.id).email == "a@x.com"
    assert store.find_by_email("nobody@x.com") is None
    assert store.find_by_id("missing") is None


def test_email_lookup_is_case_sensitive(store):
    store.create(email="Ann@x.com", password_hash="h", name="Ann")
    assert store.find_by_email("ann@x.com") is None


def test_duplicate_email_is_typed(store):
    store.create(email="a@x.com", password_hash="h", name="Ann")

    with pytest.raises(StoreError) as exc:
        store.create(email="a@x.com", password_hash="h2", name="Other")

    assert exc.value.kind is StoreErrorKind.DUPLICATE_EMAIL
    assert len(store.list_all()) == 1


def test_update_fields(store):
    u = store.create(email="a@x.com", password_hash="h", name="Ann")

    updated = store.update(u.id, {"name": "Annie", "role": Role.ADMIN})

    assert updated.name == "Annie"
    assert updated.role == "ADMIN"
    assert updated.updated_at >= u.updated_at


def test_update_rejects_other_fields(store):
    u = store.create(email="a@x.com", password_hash="h", name="Ann")
    with pytest.raises(ValueError):
        store.update(u.id, {"email": "b@x.com"})


def test_update_and_delete_missing_are_not_found(store):
    with pytest.raises(StoreError) as exc:
        store.update("missing", {"name": "Zed"})
    assert exc.value.kind is StoreErrorKind.NOT_FOUND

    with pytest.raises(StoreError) as exc:
        store.delete("missing")
    assert exc.value.kind is StoreErrorKind.NOT_FOUND


def test_delete(store):
    u = store.create(email="a@x.com", password_hash="h", name="Ann")
    store.delete(u.id)
    assert store.find_by_id(u.id) is None


def test_list_newest_first(store):
    first = store.create(email="1@x.com", password_hash="h", name="One")
    second = store.create(email="2@x.com", password_hash="h", name="Two")
    third = store.create(email="3@x.com", password_hash="h", name="Three")

    assert [u.id for u in store.list_all()] == [third.id, second.id, first.id]


def test_missing_table_is_unavailable():
    # engine without create_tables: sqlite answers "no such table"
    eng = make_engine("sqlite://")
    try:
        bare = UserStore(make_session_factory(eng))
        with pytest.raises(StoreError) as exc:
            bare.find_by_email("a@x.com")
        assert exc.value.kind is StoreErrorKind.UNAVAILABLE
    finally:
        eng.dispose()


def test_upsert_admin_creates_then_promotes(store):
    created = store.upsert_admin(email="boss@x.com", password_hash="h1", name="Boss")
    assert created.role == "ADMIN"

    u = store.create(email="a@x.com", password_hash="h", name="Ann")
    promoted = store.upsert_admin(email="a@x.com", password_hash="h2", name="ignored")

    assert promoted.id == u.id
    assert promoted.role == "ADMIN"
    assert promoted.password_hash == "h2"
    assert promoted.name == "Ann"


def test_store_error_mapping():
    assert isinstance(from_store_error(StoreError(StoreErrorKind.DUPLICATE_EMAIL)), ConflictError)
    assert isinstance(from_store_error(StoreError(StoreErrorKind.NOT_FOUND)), NotFoundError)

    err = from_store_error(StoreError(StoreErrorKind.UNAVAILABLE))
    assert isinstance(err, InfrastructureError)
    assert err.status_code == 500
    assert err.details == {"code": "DATABASE_UNAVAILABLE"}

    err = from_store_error(StoreError(StoreErrorKind.DATABASE_ERROR))
    assert err.details == {"code": "DATABASE_ERROR"}
