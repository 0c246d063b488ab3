from __future__ import annotations

import logging
import multiprocessing
import os
from typing import Final

LOGGER: Final = logging.getLogger("gunicorn.config")


def _env_int(key: str, default: int) -> int:
    """Parse integer environment values with sane fallbacks."""
    try:
        return int(os.environ.get(key, default))
    except (TypeError, ValueError):
        return default


def _configured_workers() -> int:
    cpu_count = max(multiprocessing.cpu_count(), 1)
    auto_workers = max(2, min(8, cpu_count * 2))
    if "WEB_CONCURRENCY" in os.environ:
        return _env_int("WEB_CONCURRENCY", auto_workers)
    return _env_int("GUNICORN_WORKERS", auto_workers)


# Server socket
bind = f"0.0.0.0:{os.environ.get('PORT', 5000)}"
backlog = _env_int("GUNICORN_BACKLOG", 2048)

# Threads share one Store per worker; keep threads * workers within the pool size.
worker_class = os.environ.get("GUNICORN_WORKER_CLASS", "gthread")
workers = _configured_workers()
threads = _env_int("GUNICORN_THREADS", 4)

# Timeouts and keepalive
timeout = _env_int("GUNICORN_TIMEOUT", 60)
keepalive = _env_int("GUNICORN_KEEPALIVE", 5)

max_requests = _env_int("GUNICORN_MAX_REQUESTS", 2000)
max_requests_jitter = _env_int("GUNICORN_MAX_REQUESTS_JITTER", 100)

preload_app = True

# Logging
access_log_format = '%(h)s "%(r)s" %(s)s %(b)s %(D)s'
errorlog = "-"
accesslog = "-"
loglevel = os.environ.get("GUNICORN_LOG_LEVEL", "info")

proc_name = "stockledger"


def post_fork(server, worker):
    """Drop pooled connections inherited from the preloaded parent."""
    from stockledger.store import Store
    from wsgi import app

    Store.from_app(app).engine.dispose(close=False)
    server.log.info("Worker %s reset inherited store connections", worker.pid)


def worker_exit(server, worker):
    from stockledger.store import Store
    from wsgi import app

    Store.from_app(app).close()


LOGGER.info(
    "Gunicorn bind=%s class=%s workers=%s threads=%s timeout=%ss",
    bind, worker_class, workers, threads, timeout,
)
