"""
Constants for API Client Module
================================

Endpoint paths, SSE event names and user-facing fallback messages used by the
stream client and session.
"""

# Default configuration
DEFAULT_BASE_URL = "http://localhost:8080"
DEFAULT_CONNECT_TIMEOUT = 10.0

# Insights stream endpoint (credential travels as a query parameter)
INSIGHTS_PATH = "/api/ai/insights"
TOKEN_QUERY_PARAM = "token"

# SSE event names
MESSAGE_EVENT = "message"
DONE_EVENT = "done"
ERROR_EVENT = "error"

# Terminal diagnostics
CONNECTION_ERROR_MESSAGE = "Connection error"
STREAM_ERROR_MESSAGE = "Stream error"

# Pending cursor shown while a stream is still producing text
PENDING_CURSOR = "▋"
