import multiprocessing
import os
from dotenv import load_dotenv

load_dotenv()

# Server socket
bind = f"{os.getenv('HOST', '0.0.0.0')}:{os.getenv('PORT', '3000')}"
backlog = 2048

# Worker processes
workers = int(os.getenv("WEB_CONCURRENCY", min(multiprocessing.cpu_count() + 1, 4)))
worker_class = "uvicorn.workers.UvicornWorker"

# Timeouts
timeout = 60
keepalive = 5
graceful_timeout = 30

# Logging
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info")

proc_name = "calendar-todo-api"

# Worker lifecycle
max_requests = 1000
max_requests_jitter = 50

# The Motor client is created at import time and must not be shared across a fork
preload_app = False


def on_starting(server):
    """Log when the server is starting"""
    server.log.info(f"Starting {proc_name} on {bind} with {workers} workers")


def on_exit(server):
    """Log when the server is exiting"""
    server.log.info(f"Stopping {proc_name}")
