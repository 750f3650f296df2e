"""
Reader/writer lock.

Lets any number of readers proceed together while a writer holds
exclusive access.
"""

import threading
from contextlib import contextmanager


class ReadWriteLock:
    """
    Writer-preferring read-write lock.

    Once a writer is waiting, new readers block until it has finished, so a
    steady stream of readers cannot starve writers. The lock is not
    reentrant: a thread must not acquire it again while holding it.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0  # Active readers
        self._writer = False  # Whether a writer holds the lock
        self._waiting_writers = 0

    def acquire_read(self):
        """
        Acquire a read lock. Multiple readers can hold this type of lock simultaneously.
        """
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1

    def release_read(self):
        """
        Release a read lock.
        """
        with self._cond:
            if self._readers <= 0:
                raise RuntimeError("release_read() called without a matching acquire_read()")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self):
        """
        Acquire the write lock, blocking until there are no active readers or writer.
        """
        with self._cond:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            except BaseException:
                # Readers may be blocked on this writer
                self._waiting_writers -= 1
                self._cond.notify_all()
                raise
            self._waiting_writers -= 1
            self._writer = True

    def release_write(self):
        """
        Release the write lock.
        """
        with self._cond:
            if not self._writer:
                raise RuntimeError("release_write() called without a matching acquire_write()")
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self):
        self.acquire_read()
        try:
            yield self
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self):
        self.acquire_write()
        try:
            yield self
        finally:
            self.release_write()
