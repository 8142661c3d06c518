from .middleware import GzipRoute, LoggingMiddleware
from .routes import api_router, ping_router, register_exception_handlers, text_router

__all__ = [
    "GzipRoute",
    "LoggingMiddleware",
    "api_router",
    "ping_router",
    "register_exception_handlers",
    "text_router",
]
