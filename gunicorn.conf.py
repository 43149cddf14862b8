"""
Gunicorn configuration for WorkSpace Hub deployment.

Usage:
    gunicorn app.main:app -c gunicorn.conf.py
"""

# Bind to all interfaces on port 8000
bind = "0.0.0.0:8000"

# Single worker: content handles resolve only in the process that issued them
workers = 1

# Use Uvicorn's ASGI worker for FastAPI
worker_class = "uvicorn.workers.UvicornWorker"

# Request timeout (seconds)
timeout = 60

# Keep-alive connections (seconds)
keepalive = 5

# Logging
accesslog = "-"  # stdout
errorlog = "-"   # stderr
loglevel = "info"
