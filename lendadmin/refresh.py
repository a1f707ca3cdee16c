import threading
import time
from datetime import datetime

from flask import current_app


class DataRefreshManager:
    """Lets a successful write tell every registered listener to re-fetch."""

    def __init__(self, logger=None):
        self._callbacks = []
        self._logger = logger

    def register_refresh_callback(self, callback):
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_refresh_callback(self, callback):
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def refresh_all(self):
        # Snapshot so a callback may unregister itself
        for callback in list(self._callbacks):
            try:
                callback()
            except Exception:
                if self._logger is not None:
                    self._logger.exception("Error refreshing listener %r", callback)

    @staticmethod
    def get_cache_buster():
        return {"t": int(time.time() * 1000)}


class RefreshTracker:
    """Refresh listener backing GET /refresh/version; open pages poll it and reload on change."""

    def __init__(self):
        self.version = 0
        self.refreshed_at = None
        self._lock = threading.Lock()

    def __call__(self):
        with self._lock:
            self.version += 1
            self.refreshed_at = datetime.now().isoformat(timespec="seconds")

    def as_dict(self):
        with self._lock:
            return {"version": self.version, "refreshed_at": self.refreshed_at}


def init_refresh(app):
    manager = DataRefreshManager(logger=app.logger)
    tracker = RefreshTracker()
    manager.register_refresh_callback(tracker)
    app.extensions["data_refresh"] = manager
    app.extensions["refresh_tracker"] = tracker


def refresh_all():
    current_app.extensions["data_refresh"].refresh_all()
