import logging

import pytest

from docmap.errors import DocumentNotFound
from docmap.identity import IdentityKey, IdentityMap


class User:
    def __init__(self, id=None, name=""):
        self.id = id
        self.name = name


class Order:
    def __init__(self, pk=None):
        self.pk = pk


@pytest.fixture
def identity_map():
    im = IdentityMap("test")
    yield im
    im.clear()


def test_put_then_get_returns_same_instance(identity_map):
    user_a = User(1, "Alice")
    identity_map.put(("User", 1), user_a)

    assert identity_map.get(("User", 1)) is user_a
    assert identity_map.get(("User", 2)) is None

    identity_map.clear()
    assert identity_map.get(("User", 1)) is None


def test_unknown_key_is_a_miss(identity_map):
    assert identity_map.get(IdentityKey("User", 42)) is None
    assert ("User", 42) not in identity_map
    assert len(identity_map) == 0


def test_put_overwrites_last_write_wins(identity_map):
    first, second = User(1), User(1)
    identity_map.put(("User", 1), first)
    identity_map.put(("User", 1), second)

    assert identity_map.get(("User", 1)) is second
    assert len(identity_map) == 1


def test_distinct_tags_never_collide(identity_map):
    user, order = User(7), Order(7)
    identity_map.put(("User", 7), user)
    identity_map.put(("Order", 7), order)

    assert identity_map.get(("User", 7)) is user
    assert identity_map.get(("Order", 7)) is order


def test_tuple_and_identity_key_are_interchangeable(identity_map):
    user = User(3)
    identity_map.put(IdentityKey("User", 3), user)
    assert identity_map.get(("User", 3)) is user


def test_invalid_key_raises_type_error(identity_map):
    with pytest.raises(TypeError):
        identity_map.put("User:1", User(1))


def test_clear_is_idempotent(identity_map):
    identity_map.put(("User", 1), User(1))
    identity_map.clear()
    identity_map.clear()
    assert len(identity_map) == 0
    assert identity_map.scope().is_empty


def test_add_derives_key_from_entity_class_and_id(identity_map):
    user = User(5)
    order = Order(pk=9)
    identity_map.add(user)
    identity_map.add(order)
    identity_map.add(User())  # no identity yet

    assert identity_map.get((User, 5)) is user
    assert identity_map.get((Order, 9)) is order
    assert len(identity_map) == 2


def test_remove_discards_entry_and_ignores_missing(identity_map):
    identity_map.put(("User", 1), User(1))
    identity_map.remove(("User", 1))
    identity_map.remove(("User", 1))
    assert identity_map.get(("User", 1)) is None


def test_fetch_loads_once_per_scope(identity_map):
    calls = []

    def loader():
        calls.append(1)
        return User(1)

    first = identity_map.fetch(("User", 1), loader)
    second = identity_map.fetch(("User", 1), loader)

    assert first is second
    assert calls == [1]


def test_fetch_miss_returns_none_or_raises_when_required(identity_map):
    assert identity_map.fetch(("User", 404), lambda: None) is None
    assert ("User", 404) not in identity_map

    with pytest.raises(DocumentNotFound) as excinfo:
        identity_map.fetch(("User", 404), lambda: None, required=True)
    assert excinfo.value.tag == "User"
    assert excinfo.value.identity == 404


def test_disabled_map_never_caches(identity_map):
    identity_map.enabled = False
    identity_map.put(("User", 1), User(1))
    assert identity_map.get(("User", 1)) is None

    loads = []
    identity_map.fetch(("User", 1), lambda: loads.append(1) or User(1))
    identity_map.fetch(("User", 1), lambda: loads.append(1) or User(1))
    assert loads == [1, 1]


def test_values_lists_current_scope_entries(identity_map):
    a, b = User(1), User(2)
    identity_map.put(("User", 1), a)
    identity_map.put(("User", 2), b)
    assert set(map(id, identity_map.values())) == {id(a), id(b)}


def test_clear_logs_dropped_entries(identity_map, caplog):
    caplog.set_level(logging.DEBUG, logger=identity_map.logger.name)
    identity_map.put(("User", 1), User(1))
    identity_map.clear()
    messages = [record.message for record in caplog.records if record.name == identity_map.logger.name]
    assert any("Cleared 1 identity map entries" in message for message in messages)


def test_identity_key_for_entity_and_label():
    assert IdentityKey.for_entity(User(2)) == IdentityKey(User, 2)
    assert IdentityKey.for_entity(User()) is None
    assert IdentityKey(User, 2).label() == "User[2]"
    assert IdentityKey("Order", "a").label() == "Order['a']"
