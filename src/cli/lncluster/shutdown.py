"""Process-wide shutdown signal shared by worker threads."""

import threading

shutdown_event = threading.Event()
