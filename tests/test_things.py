from __future__ import annotations

import threading

from oapistore.things import Thing, ThingStore, ThingWithId


def test_empty_store_lists_nothing():
    assert ThingStore().list_things() == []


def test_first_thing_gets_id_zero():
    store = ThingStore()
    added = store.add_thing(Thing(name="Thing 1"))
    assert added == ThingWithId(id=0, name="Thing 1")


def test_ids_increase_and_list_is_ordered():
    store = ThingStore()
    first = store.add_thing(Thing(name="Thing 1"))
    second = store.add_thing(Thing(name="Thing 2"))
    assert second.id == first.id + 1
    assert store.list_things() == [first, second]


def test_list_is_sorted_by_id_regardless_of_insertion():
    store = ThingStore()
    store.things[5] = Thing(name="five")
    store.things[2] = Thing(name="two")
    ids = [t.id for t in store.list_things()]
    assert ids == sorted(ids)
    assert [t.name for t in store.list_things()] == ["two", "five"]


def test_concurrent_adds_get_unique_ids():
    store = ThingStore()
    results = []
    results_lock = threading.Lock()

    def worker():
        for _ in range(50):
            added = store.add_thing(Thing(name="x"))
            with results_lock:
                results.append(added.id)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(set(results)) == len(results)
    assert len(store.list_things()) == len(results)
    assert store.last_id == len(results)