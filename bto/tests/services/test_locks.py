import threading

from bto.core.locks import KeyedLocks, application_key, inventory_key


def test_entries_are_dropped_after_release():
    locks = KeyedLocks()
    for i in range(1000):
        with locks.hold(application_key(f"app-{i}"), inventory_key("Alpha", "TWO_ROOM")):
            assert len(locks) == 2
    assert len(locks) == 0


def test_reentrant_hold_keeps_entry_until_outermost_release():
    locks = KeyedLocks()
    key = application_key("app-1")
    with locks.hold(key):
        with locks.hold(key):
            assert len(locks) == 1
        assert len(locks) == 1
    assert len(locks) == 0


def test_entry_dropped_on_error():
    locks = KeyedLocks()
    try:
        with locks.hold(application_key("app-1")):
            raise RuntimeError("boom")
    except RuntimeError:
        pass
    assert len(locks) == 0


def test_waiter_shares_the_holders_lock():
    locks = KeyedLocks()
    key = application_key("app-1")
    order = []
    entered = threading.Event()

    def waiter():
        entered.set()
        with locks.hold(key):
            order.append("waiter")

    with locks.hold(key):
        t = threading.Thread(target=waiter)
        t.start()
        entered.wait(timeout=5)
        t.join(timeout=0.2)
        assert t.is_alive()
        order.append("holder")

    t.join(timeout=5)
    assert order == ["holder", "waiter"]
    assert len(locks) == 0
