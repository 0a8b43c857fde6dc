import pytest

from bizboost.core.errors import NotFound
from bizboost.db import crud
from bizboost.models.favorites import Favorite

USER = "demo-user-123"


def test_add_favorite_is_idempotent(directory, business, store):
    directory.add_favorite(USER, business.id)
    directory.add_favorite(USER, business.id)

    assert directory.is_favorite(USER, business.id) is True
    with store.session() as db:
        assert db.query(Favorite).filter_by(user_id=USER, business_id=business.id).count() == 1


def test_remove_favorite_on_missing_pair_is_noop(directory, business):
    directory.remove_favorite(USER, business.id)
    assert directory.is_favorite(USER, business.id) is False

    directory.add_favorite(USER, business.id)
    directory.remove_favorite(USER, business.id)
    directory.remove_favorite(USER, business.id)
    assert directory.is_favorite(USER, business.id) is False


def test_add_favorite_for_unknown_business_is_not_found(directory, store):
    with pytest.raises(NotFound):
        directory.add_favorite(USER, "no-such-business")
    with store.session() as db:
        assert db.query(Favorite).count() == 0


def test_favorites_are_per_user(directory, business):
    directory.add_favorite("alice", business.id)
    assert directory.is_favorite("alice", business.id) is True
    assert directory.is_favorite("bob", business.id) is False
    assert directory.get_favorites_by_user("bob") == []


def test_list_favorites_most_recent_first(directory, clock):
    names = ["Tech Haven", "Cafe Bliss", "Quick Clean"]
    ids = [directory.create_business(name=n, category="Services").id for n in names]
    for business_id in ids:
        directory.add_favorite(USER, business_id)

    assert [b.name for b in directory.get_favorites_by_user(USER)] == ["Quick Clean", "Cafe Bliss", "Tech Haven"]

    # Re-adding an existing favorite keeps its original position.
    directory.add_favorite(USER, ids[0])
    assert [b.name for b in directory.get_favorites_by_user(USER)][-1] == "Tech Haven"


def test_favorite_for_deleted_business_disappears(directory, business, store):
    directory.add_favorite(USER, business.id)
    with store.session() as db:
        crud.delete_business(db, business.id)
    assert directory.get_favorites_by_user(USER) == []
    assert directory.is_favorite(USER, business.id) is False


def test_favorite_locks_are_released(directory, business):
    for i in range(20):
        directory.remove_favorite(USER, f"ghost-{i}")
    directory.add_favorite(USER, business.id)
    directory.remove_favorite(USER, business.id)

    assert len(directory.locks) == 0
