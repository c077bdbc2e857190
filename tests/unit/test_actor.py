import pytest

from dhcpv6pd.actor import Actor


def start_actor(initial):
    actor = Actor("test-actor", initial)
    actor.start()
    return actor


def test_transformations_apply_in_order():
    actor = start_actor([])
    try:
        for value in range(5):
            actor.send(lambda state, v: state + [v], value)
        actor.join_queue()

        assert actor.deref() == [0, 1, 2, 3, 4]
    finally:
        actor.stop(1.0)


def test_watches_see_old_and_new():
    actor = start_actor(0)
    seen = []
    actor.watch("recorder", lambda key, old, new: seen.append((key, old, new)))
    try:
        actor.send(lambda state: state + 1)
        actor.send(lambda state: state * 10)
        actor.join_queue()

        assert seen == [("recorder", 0, 1), ("recorder", 1, 10)]
    finally:
        actor.stop(1.0)


def test_failing_transformation_keeps_state_and_worker_alive(caplog):
    actor = start_actor(1)
    try:
        actor.send(lambda state: 1 / 0)
        actor.send(lambda state: state + 1)
        actor.join_queue()

        assert actor.deref() == 2
        assert "transformation" in caplog.text
    finally:
        actor.stop(1.0)


def test_failing_watch_does_not_block_other_watches():
    actor = start_actor(0)
    seen = []

    def broken(key, old, new):
        raise RuntimeError("boom")

    actor.watch("broken", broken)
    actor.watch("recorder", lambda key, old, new: seen.append(new))
    try:
        actor.send(lambda state: state + 1)
        actor.join_queue()

        assert seen == [1]
    finally:
        actor.stop(1.0)


def test_duplicate_watch_key_rejected():
    actor = Actor("test-actor", None)
    actor.watch("a", lambda *args: None)

    with pytest.raises(ValueError):
        actor.watch("a", lambda *args: None)

    actor.unwatch("a")
    actor.watch("a", lambda *args: None)


def test_stop_terminates_worker():
    actor = start_actor(None)
    actor.stop(1.0)

    assert not actor.is_alive()
