"""Process-local request sampling and host resource readings for the admin monitor."""
import os
import threading
import time
from datetime import datetime, timezone

PERF_WINDOW_SECONDS = 24 * 60 * 60
MINUTE = 60
HOUR = 60 * 60


class PerfRecorder:
    """Per-minute request counters kept for a rolling 24 hour window."""

    def __init__(self, window_seconds=PERF_WINDOW_SECONDS):
        self.window_seconds = window_seconds
        self._buckets = {}
        self._lock = threading.Lock()

    def _prune(self, now):
        cutoff = now - self.window_seconds
        for minute in [m for m in self._buckets if m < cutoff]:
            del self._buckets[minute]

    def record(self, duration_ms, bytes_in=0, bytes_out=0, now=None):
        now = time.time() if now is None else now
        minute = int(now // MINUTE) * MINUTE
        with self._lock:
            self._prune(now)
            bucket = self._buckets.setdefault(
                minute, {"requests": 0, "total_duration_ms": 0.0, "bytes_in": 0, "bytes_out": 0}
            )
            bucket["requests"] += 1
            bucket["total_duration_ms"] += duration_ms
            bucket["bytes_in"] += bytes_in or 0
            bucket["bytes_out"] += bytes_out or 0

    def hourly(self, now=None):
        """Hour buckets covering the window, oldest first, plus total bytes moved."""
        now = time.time() if now is None else now
        with self._lock:
            self._prune(now)
            minutes = list(self._buckets.items())

        hours = {}
        total_bytes = 0
        for minute, bucket in minutes:
            hour = int(minute // HOUR) * HOUR
            agg = hours.setdefault(hour, {"requests": 0, "total_duration_ms": 0.0})
            agg["requests"] += bucket["requests"]
            agg["total_duration_ms"] += bucket["total_duration_ms"]
            total_bytes += bucket["bytes_in"] + bucket["bytes_out"]

        performance = []
        hour = int((now - self.window_seconds) // HOUR) * HOUR
        while hour <= now:
            agg = hours.get(hour, {"requests": 0, "total_duration_ms": 0.0})
            avg = agg["total_duration_ms"] / agg["requests"] if agg["requests"] else 0
            performance.append({
                "time": datetime.fromtimestamp(hour, timezone.utc).strftime("%H:%M"),
                "requests": agg["requests"],
                "responseTime": int(avg + 0.5),
            })
            hour += HOUR
        return performance, total_bytes

    def reset(self):
        with self._lock:
            self._buckets.clear()


perf_recorder = PerfRecorder()
STARTED_AT = time.time()


def uptime_seconds():
    return int(time.time() - STARTED_AT)


def memory_stats():
    """Total/free bytes from sysconf; zeros where the platform does not expose them."""
    try:
        page = os.sysconf("SC_PAGE_SIZE")
        total = page * os.sysconf("SC_PHYS_PAGES")
        free = page * os.sysconf("SC_AVPHYS_PAGES")
    except (AttributeError, ValueError, OSError):
        return {"total": 0, "free": 0, "used": 0, "percent": 0}
    used = total - free
    return {
        "total": total,
        "free": free,
        "used": used,
        "percent": int(used / total * 100 + 0.5) if total else 0,
    }


def cpu_percent():
    """One-minute load average as a share of the available cores."""
    try:
        load = os.getloadavg()[0]
    except (AttributeError, OSError):
        return 0
    cores = os.cpu_count() or 1
    return max(0, min(100, int(load / cores * 100 + 0.5)))


def percent_of(used, limit):
    if not limit:
        return 0
    return max(0, min(100, int(used / limit * 100 + 0.5)))
