# Gunicorn configuration file
import os

# Application factory
wsgi_app = "app:create_app()"

# Bind to the port provided by the host
bind = f"0.0.0.0:{os.environ.get('PORT', '8080')}"

# Generation is a single in-memory pass; long ranges still finish well under this
timeout = 60

# Graceful timeout for worker shutdown
graceful_timeout = 30

# Number of workers
workers = int(os.environ.get('WEB_CONCURRENCY', 2))

# Worker class
worker_class = "sync"

# Logging
accesslog = "-"
errorlog = "-"
loglevel = os.environ.get('LOG_LEVEL', 'info').lower()
