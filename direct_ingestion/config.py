"""
Configuration defaults for the direct ingestion client.
"""
import os

# Server configuration
SERVER_URL = os.getenv('WAVEFRONT_SERVER', 'https://localhost')
TOKEN = os.getenv('WAVEFRONT_TOKEN', '')

# Buffer configuration
MAX_QUEUE_SIZE = int(os.getenv('WAVEFRONT_MAX_QUEUE_SIZE', '50000'))  # per data type
BATCH_SIZE = int(os.getenv('WAVEFRONT_BATCH_SIZE', '10000'))  # points per request
FLUSH_INTERVAL = int(os.getenv('WAVEFRONT_FLUSH_INTERVAL', '5'))  # seconds

# HTTP client configuration
REQUEST_TIMEOUT = 30  # seconds
MAX_RETRIES = 1  # total attempts for connection errors
RETRY_DELAY = 5  # seconds

# Source used when a point is reported without one
DEFAULT_SOURCE = os.getenv('WAVEFRONT_DEFAULT_SOURCE', 'wavefrontDirectSender')

# Logging configuration
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
