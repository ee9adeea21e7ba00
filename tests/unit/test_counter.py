"""
Unit tests for the active connection counter.
"""

import threading

from rangeserver.core.counter import ActiveConnectionCounter


class TestActiveConnectionCounter:

    def test_acquire_release(self):
        counter = ActiveConnectionCounter()

        assert counter.try_acquire()
        assert counter.try_acquire()
        assert counter.count == 2

        counter.release()
        assert counter.count == 1
        assert counter.peak == 2

    def test_unbounded_by_default(self):
        counter = ActiveConnectionCounter()

        assert all(counter.try_acquire() for _ in range(1000))
        assert counter.count == 1000

    def test_limit(self):
        counter = ActiveConnectionCounter(limit=2)

        assert counter.try_acquire()
        assert counter.try_acquire()
        assert not counter.try_acquire()
        assert counter.count == 2

        counter.release()
        assert counter.try_acquire()

    def test_release_never_goes_negative(self):
        counter = ActiveConnectionCounter()

        counter.release()

        assert counter.count == 0

    def test_concurrent_updates_are_not_lost(self):
        """Many threads incrementing and decrementing end back at zero."""
        counter = ActiveConnectionCounter()

        def churn():
            for _ in range(1000):
                counter.try_acquire()
                counter.release()

        threads = [threading.Thread(target=churn) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert counter.count == 0
        assert 1 <= counter.peak <= 8
