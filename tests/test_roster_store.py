"""
Tests for ownership-scoped roster CRUD at the store layer.
"""
import pytest

from roster_platform.errors import Conflict, InvalidInput, NotFound
from roster_platform.rosters import store as roster_store
from roster_platform.rosters.store import (
    create_roster,
    delete_roster,
    get_roster,
    list_rosters,
    update_roster,
)


@pytest.fixture
def ticking_clock(monkeypatch):
    """Strictly increasing microsecond timestamps for updated_at."""
    counter = iter(range(1, 10_000))
    monkeypatch.setattr(
        roster_store, "utcnow_iso_precise", lambda: f"2026-01-01T00:00:00.{next(counter):06d}Z"
    )


def _create(conn, roster_id, owner_id, **kw):
    args = dict(team_id="orc", team_name="Orcs", data={"players": [1, 2]}, name="Main")
    args.update(kw)
    return create_roster(conn, roster_id=roster_id, owner_id=owner_id, **args)


def test_create_and_get_roster(store, make_user):
    """Created roster comes back with parsed data and no owner field."""
    uid = make_user("a@example.com")
    with store.transaction() as conn:
        assert _create(conn, "r1", uid) == "r1"
        r = get_roster(conn, "r1", uid)

    assert r["id"] == "r1"
    assert r["name"] == "Main"
    assert r["team_id"] == "orc"
    assert r["team_name"] == "Orcs"
    assert r["data"] == {"players": [1, 2]}
    assert r["share_id"] is None
    assert "user_id" not in r
    assert r["created_at"] == r["updated_at"]


def test_name_defaults_to_empty(store, make_user):
    uid = make_user("a@example.com")
    with store.transaction() as conn:
        _create(conn, "r1", uid, name=None)
        assert get_roster(conn, "r1", uid)["name"] == ""


def test_create_requires_fields(store, make_user):
    uid = make_user("a@example.com")
    with store.transaction() as conn:
        with pytest.raises(InvalidInput):
            _create(conn, "", uid)
        with pytest.raises(InvalidInput):
            _create(conn, "r1", uid, team_id="  ")
        with pytest.raises(InvalidInput):
            _create(conn, "r1", uid, data=None)


def test_duplicate_id_conflicts_across_users(store, make_user):
    """Roster ids are global: another user's id cannot be reused."""
    a = make_user("a@example.com")
    b = make_user("b@example.com")
    with store.transaction() as conn:
        _create(conn, "r1", a)

    with pytest.raises(Conflict) as exc:
        with store.transaction() as conn:
            _create(conn, "r1", b)
    assert exc.value.detail == "roster_exists"

    # The original is untouched.
    with store.transaction() as conn:
        assert get_roster(conn, "r1", a)["team_name"] == "Orcs"


def test_other_users_roster_is_not_found(store, make_user):
    a = make_user("a@example.com")
    b = make_user("b@example.com")
    with store.transaction() as conn:
        _create(conn, "r1", a)

    with store.transaction() as conn:
        with pytest.raises(NotFound):
            get_roster(conn, "r1", b)
        with pytest.raises(NotFound):
            update_roster(conn, "r1", b, name="Stolen")
        with pytest.raises(NotFound):
            delete_roster(conn, "r1", b)
        assert list_rosters(conn, b) == []
        assert get_roster(conn, "r1", a)["name"] == "Main"


def test_partial_update_touches_only_given_fields(store, make_user, ticking_clock):
    uid = make_user("a@example.com")
    with store.transaction() as conn:
        _create(conn, "r1", uid)
        before = get_roster(conn, "r1", uid)
        update_roster(conn, "r1", uid, name="Renamed")
        after = get_roster(conn, "r1", uid)

    assert after["name"] == "Renamed"
    assert after["team_id"] == before["team_id"]
    assert after["data"] == before["data"]
    assert after["created_at"] == before["created_at"]
    assert after["updated_at"] > before["updated_at"]


def test_empty_update_still_refreshes_updated_at(store, make_user, ticking_clock):
    uid = make_user("a@example.com")
    with store.transaction() as conn:
        _create(conn, "r1", uid)
        before = get_roster(conn, "r1", uid)["updated_at"]
        update_roster(conn, "r1", uid)
        assert get_roster(conn, "r1", uid)["updated_at"] > before


def test_update_rejects_blank_team_fields(store, make_user):
    uid = make_user("a@example.com")
    with store.transaction() as conn:
        _create(conn, "r1", uid)
        with pytest.raises(InvalidInput):
            update_roster(conn, "r1", uid, team_name="")


def test_list_is_newest_first_and_omits_data(store, make_user, ticking_clock):
    uid = make_user("a@example.com")

    with store.transaction() as conn:
        _create(conn, "old", uid)
        _create(conn, "new", uid)
        # Touching "old" moves it to the front.
        update_roster(conn, "old", uid, name="bumped")
        rows = list_rosters(conn, uid)

    assert [r["id"] for r in rows] == ["old", "new"]
    assert all("data" not in r for r in rows)
    assert set(rows[0]) == {"id", "name", "team_id", "team_name", "share_id", "created_at", "updated_at"}


def test_delete_then_get_is_not_found(store, make_user):
    uid = make_user("a@example.com")
    with store.transaction() as conn:
        _create(conn, "r1", uid)
        delete_roster(conn, "r1", uid)
        with pytest.raises(NotFound):
            get_roster(conn, "r1", uid)
        with pytest.raises(NotFound):
            delete_roster(conn, "r1", uid)


@pytest.mark.parametrize("data", [False, 0, ""])
def test_empty_scalar_document_rejected(store, make_user, data):
    uid = make_user("a@example.com")
    with store.transaction() as conn:
        with pytest.raises(InvalidInput) as exc:
            _create(conn, "r1", uid, data=data)
    assert exc.value.detail == "missing_required_fields"


@pytest.mark.parametrize("data", [{}, []])
def test_empty_container_document_accepted(store, make_user, data):
    uid = make_user("a@example.com")
    with store.transaction() as conn:
        _create(conn, "r1", uid, data=data)
        assert get_roster(conn, "r1", uid)["data"] == data
