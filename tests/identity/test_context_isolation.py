import asyncio
import threading

from docmap.identity import IdentityMap, unit_of_work


def test_threads_observe_only_their_own_entries():
    identity_map = IdentityMap("threads")
    errors: list[Exception] = []
    observed: dict[int, object] = {}
    barrier = threading.Barrier(4)

    def worker(offset: int) -> None:
        try:
            entity = object()
            identity_map.put(("Order", 7), entity)
            barrier.wait()
            observed[offset] = identity_map.get(("Order", 7))
            assert observed[offset] is entity
            assert len(identity_map) == 1
        except Exception as exc:  # pragma: no cover - failure path
            errors.append(exc)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert len({id(value) for value in observed.values()}) == 4


def test_other_thread_does_not_see_entries():
    identity_map = IdentityMap("cross-thread")
    order = object()
    identity_map.put(("Order", 7), order)
    seen = []

    thread = threading.Thread(target=lambda: seen.append(identity_map.get(("Order", 7))))
    thread.start()
    thread.join()

    assert seen == [None]
    assert identity_map.get(("Order", 7)) is order
    identity_map.clear()


def test_clear_in_one_thread_leaves_others_untouched():
    identity_map = IdentityMap("clear-isolation")
    populated = threading.Event()
    cleared = threading.Event()
    result = {}

    def holder() -> None:
        identity_map.put(("User", 1), "kept")
        populated.set()
        cleared.wait(timeout=5)
        result["value"] = identity_map.get(("User", 1))

    thread = threading.Thread(target=holder)
    thread.start()
    populated.wait(timeout=5)
    identity_map.clear()
    cleared.set()
    thread.join()

    assert result["value"] == "kept"


def test_thread_hammering_is_error_free():
    identity_map = IdentityMap("hammer")
    errors: list[Exception] = []
    barrier = threading.Barrier(5)

    def worker(offset: int) -> None:
        try:
            barrier.wait()
            for idx in range(200):
                with unit_of_work(identity_map):
                    key = ("User", offset * 1000 + idx)
                    identity_map.put(key, idx)
                    assert identity_map.get(key) == idx
                    assert len(identity_map) == 1
        except Exception as exc:  # pragma: no cover - failure path
            errors.append(exc)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(5)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []


def test_concurrent_tasks_are_isolated():
    identity_map = IdentityMap("tasks")

    async def request(name: str, started: asyncio.Barrier):
        with unit_of_work(identity_map):
            entity = object()
            identity_map.put(("Order", 7), entity)
            await started.wait()
            await asyncio.sleep(0)
            return name, identity_map.get(("Order", 7)) is entity, len(identity_map)

    async def main():
        started = asyncio.Barrier(3)
        return await asyncio.gather(*(request(f"r{i}", started) for i in range(3)))

    results = asyncio.run(main())
    assert [ok for _, ok, _ in results] == [True, True, True]
    assert [count for _, _, count in results] == [1, 1, 1]


def test_child_task_does_not_inherit_parent_scope():
    identity_map = IdentityMap("inherit")

    async def child():
        return identity_map.get(("User", 1))

    async def main():
        identity_map.put(("User", 1), "parent")
        seen_by_child = await asyncio.create_task(child())
        return seen_by_child, identity_map.get(("User", 1))

    seen_by_child, seen_by_parent = asyncio.run(main())
    assert seen_by_child is None
    assert seen_by_parent == "parent"
