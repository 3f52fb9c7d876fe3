"""
Gunicorn configuration for the analytics API.

Each worker keeps its own in-memory result cache, so fewer workers means
more cache hits per computed response.
"""

import multiprocessing
import os

bind = os.getenv("BIND", "0.0.0.0:8000")
workers = int(os.getenv("WORKERS", min(4, multiprocessing.cpu_count())))
worker_class = "uvicorn.workers.UvicornWorker"

# Cohort and segment queries over a year of orders can be slow
timeout = int(os.getenv("WORKER_TIMEOUT", "120"))
graceful_timeout = 30
keepalive = 5

proc_name = "storefront-analytics-api"

# Requests are logged by RequestLoggingMiddleware through structlog
errorlog = "-"
accesslog = None
loglevel = os.getenv("LOG_LEVEL", "info").lower()
