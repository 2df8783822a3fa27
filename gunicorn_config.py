import os

# Server Socket
bind = os.environ.get("GUNICORN_BIND", "127.0.0.1:8000")  # NGINX proxies requests

# Worker Settings
workers = int(os.environ.get("GUNICORN_WORKERS", "4"))
threads = 2
worker_class = "gthread"

# Geocoding lookups can take a few seconds
timeout = 60
graceful_timeout = 30
keepalive = 5
max_requests = 1000
max_requests_jitter = 50

# Logging
accesslog = "-"
errorlog = "-"
loglevel = "info"

# Process Name
proc_name = "trackas_gunicorn"

wsgi_app = "app:app"
