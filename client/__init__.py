"""
client — Python client for the Task Manager API.

Provides:
  • ``SessionContext`` — the single holder of the bearer token
  • ``TaskApiClient`` — async wrapper over the REST endpoints
"""

from client.api import ApiError, TaskApiClient
from client.session import NotAuthenticatedError, SessionContext

__all__ = ["ApiError", "NotAuthenticatedError", "SessionContext", "TaskApiClient"]
