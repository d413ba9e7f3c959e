import threading
import time

import pytest

from src.utils.singleflight import SingleFlight


def test_sequential_calls_each_run():
    flights = SingleFlight()
    counter = {"n": 0}

    def work():
        counter["n"] += 1
        return counter["n"]

    assert flights.do("k", work) == (1, False)
    assert flights.do("k", work) == (2, False)
    assert not flights.in_flight("k")


def test_waiters_share_leader_result():
    flights = SingleFlight()
    started = threading.Event()
    release = threading.Event()
    outcomes = []

    def slow():
        started.set()
        release.wait(5)
        return "papers"

    leader = threading.Thread(target=lambda: outcomes.append(flights.do("k", slow)))
    leader.start()
    assert started.wait(5)
    assert flights.in_flight("k")

    follower = threading.Thread(target=lambda: outcomes.append(flights.do("k", lambda: "other")))
    follower.start()
    time.sleep(0.1)
    release.set()
    leader.join(5)
    follower.join(5)

    assert ("papers", False) in outcomes
    assert len(outcomes) == 2
    assert all(result == "papers" for result, _ in outcomes)


def test_leader_error_propagates_to_waiters():
    flights = SingleFlight()
    started = threading.Event()
    release = threading.Event()
    errors = []

    def failing():
        started.set()
        release.wait(5)
        raise RuntimeError("upstream down")

    def run(fn):
        try:
            flights.do("k", fn)
        except RuntimeError as exc:
            errors.append(str(exc))

    leader = threading.Thread(target=run, args=(failing,))
    leader.start()
    assert started.wait(5)
    follower = threading.Thread(target=run, args=(lambda: "unused",))
    follower.start()
    time.sleep(0.1)
    release.set()
    leader.join(5)
    follower.join(5)

    assert errors == ["upstream down", "upstream down"]


def test_waiter_timeout():
    flights = SingleFlight()
    started = threading.Event()
    release = threading.Event()

    def slow():
        started.set()
        release.wait(5)
        return 1

    leader = threading.Thread(target=lambda: flights.do("k", slow))
    leader.start()
    assert started.wait(5)

    with pytest.raises(TimeoutError):
        flights.do("k", lambda: 2, timeout=0.01)

    release.set()
    leader.join(5)
