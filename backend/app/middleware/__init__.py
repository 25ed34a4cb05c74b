"""
Middleware package.
"""
from app.middleware.error_handler import ErrorHandlerMiddleware, register_exception_handlers
from app.middleware.request_id import RequestIdMiddleware

__all__ = [
    "ErrorHandlerMiddleware",
    "RequestIdMiddleware",
    "register_exception_handlers",
]
