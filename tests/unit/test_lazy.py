import threading
import time

import pytest

from utils.lazy import LazyCell


def test_get_returns_same_instance():
    cell = LazyCell(object)
    assert cell.get() is cell.get()


def test_factory_runs_once_under_concurrent_first_use():
    calls = []

    def factory():
        calls.append(1)
        time.sleep(0.05)
        return object()

    cell = LazyCell(factory)
    results = []
    threads = [threading.Thread(target=lambda: results.append(cell.get())) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(calls) == 1
    assert all(result is results[0] for result in results)


def test_failed_factory_is_retried():
    attempts = []

    def factory():
        attempts.append(1)
        if len(attempts) == 1:
            raise RuntimeError("secrets down")
        return "ready"

    cell = LazyCell(factory)
    with pytest.raises(RuntimeError):
        cell.get()
    assert cell.get() == "ready"

