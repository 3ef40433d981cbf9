from __future__ import annotations

import threading

from osv_index.shared.rwlock import ReadWriteLock


def test_readers_share_the_lock():
    lock = ReadWriteLock()
    inside = threading.Barrier(3, timeout=5)

    def reader():
        with lock.read():
            inside.wait()

    threads = [threading.Thread(target=reader) for _ in range(3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)
    assert not any(t.is_alive() for t in threads)


def test_writer_waits_for_readers():
    lock = ReadWriteLock()
    order: list[str] = []
    reading = threading.Event()
    release = threading.Event()

    def reader():
        with lock.read():
            reading.set()
            release.wait(timeout=5)
            order.append("reader done")

    def writer():
        with lock.write():
            order.append("writer")

    r = threading.Thread(target=reader)
    r.start()
    reading.wait(timeout=5)
    w = threading.Thread(target=writer)
    w.start()
    release.set()
    r.join(timeout=5)
    w.join(timeout=5)
    assert order == ["reader done", "writer"]
