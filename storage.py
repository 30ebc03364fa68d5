"""persisted property values + disk writer thread"""

import json
import os
import queue
import threading
from pathlib import Path

from logs import get_logger

logger = get_logger(__name__)


def property_key(device_id, name):
    return f"{device_id}-{name}"


class MemoryStorage:
    """key/value storage that forgets everything on exit"""

    def __init__(self, values=None):
        self._values = dict(values or {})

    def get(self, key, default=None):
        return self._values.get(key, default)

    def set(self, key, value):
        self._values[key] = value

    def __contains__(self, key):
        return key in self._values


class JsonFileStorage:
    """
    Durable key/value storage backed by one JSON file.

    Reads are served from memory. Every set() queues a snapshot for the
    writer thread, which replaces the file atomically; queued snapshots
    that were overtaken by a newer one are skipped.
    """

    def __init__(self, data_dir, file_name="values.json"):
        self.path = Path(data_dir) / file_name
        self._values = {}
        self._q = queue.Queue()
        self._thread = None
        self._running = False
        self._lock = threading.Lock()
        self._count = 0
        self._load()

    @property
    def writes(self):
        with self._lock:
            return self._count

    def _load(self):
        if not self.path.exists():
            return
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("storage_load_failed", path=str(self.path), error=str(e))
            return
        if isinstance(data, dict):
            self._values = data

    def get(self, key, default=None):
        with self._lock:
            return self._values.get(key, default)

    def set(self, key, value):
        with self._lock:
            self._values[key] = value
            snapshot = dict(self._values)
        if self._running:
            self._q.put(snapshot)
        else:
            self._write(snapshot)

    def __contains__(self, key):
        with self._lock:
            return key in self._values

    def start(self):
        if self._thread and self._thread.is_alive():
            return
        self._running = True
        self._thread = threading.Thread(target=self._loop, name="storage-writer", daemon=True)
        self._thread.start()
        logger.debug("storage_started", path=str(self.path))

    def stop(self, timeout=5):
        if not self._running:
            return
        self._running = False
        self._q.put(None)
        if self._thread:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("storage_thread_still_running", path=str(self.path))
        self._thread = None

    def _loop(self):
        while True:
            item = self._q.get()
            if item is None:
                break
            # coalesce: only the newest snapshot matters
            while True:
                try:
                    newer = self._q.get_nowait()
                except queue.Empty:
                    break
                if newer is None:
                    self._write(item)
                    return
                item = newer
            self._write(item)

    def _write(self, snapshot):
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w") as f:
                json.dump(snapshot, f, indent=2)
            os.replace(tmp, self.path)
        except (OSError, TypeError, ValueError) as e:
            logger.error("storage_write_failed", path=str(self.path), error=str(e))
            return
        with self._lock:
            self._count += 1
