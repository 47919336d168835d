"""Unit tests for the FIFO work queue."""

from concurrent.futures import ThreadPoolExecutor

from storefront.shared.work_queue import WorkQueue


class TestWorkQueue:

    def test_empty(self):
        queue = WorkQueue()
        assert queue.is_empty()
        assert queue.pop() is None
        assert queue.peek() is None

    def test_fifo_order(self):
        queue = WorkQueue()
        for item in ("a", "b", "c"):
            queue.push(item)
        assert queue.size() == 3
        assert [queue.pop(), queue.pop(), queue.pop()] == ["a", "b", "c"]
        assert queue.is_empty()

    def test_peek_does_not_remove(self):
        queue = WorkQueue()
        queue.push(1)
        assert queue.peek() == 1
        assert len(queue) == 1

    def test_drain(self):
        queue = WorkQueue()
        queue.push(1)
        queue.push(2)
        assert queue.drain() == [1, 2]
        assert queue.is_empty()

    def test_concurrent_pushes_are_all_kept(self):
        queue = WorkQueue()
        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(queue.push, range(1000)))
        assert sorted(queue.drain()) == list(range(1000))
