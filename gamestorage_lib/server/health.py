"""Server health utilities.

Provides `get_health` returning server status, start time, uptime in
seconds and whether the document backend is connected.
"""
from datetime import datetime, timezone
import time
import os

# record process start time at import
_START_TIME = time.time()


def _read_version() -> str:
    version_file = os.path.join(os.path.dirname(__file__), "../../VERSION")
    if os.path.exists(version_file):
        with open(version_file, "r") as f:
            return f.read().strip()
    return "unknown"


def get_health(backend=None, server_name=None) -> dict:
    """Return a dict representing server health.

    Fields:
    - status: 'ok', or 'degraded' while the backend is not connected
    - start_time: ISO 8601 UTC timestamp when the process started
    - uptime_seconds: integer seconds since start
    - backend: name and connection state of the document backend
    """
    now = time.time()
    uptime = int(now - _START_TIME)
    start_dt = datetime.fromtimestamp(_START_TIME, tz=timezone.utc)

    status = "ok"
    backend_info = None
    if backend is not None:
        connected = bool(getattr(backend, "connected", True))
        backend_info = {"name": getattr(backend, "name", type(backend).__name__), "connected": connected}
        if not connected:
            status = "degraded"

    return {
        "status": status,
        "start_time": start_dt.isoformat(),
        "uptime_seconds": uptime,
        "version": _read_version(),
        "server_name": server_name,
        "backend": backend_info,
    }
