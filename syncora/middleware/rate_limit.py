"""
Rate Limiting for FastAPI

Protects the credential endpoints (login, second factor, signup) against
brute force attempts.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from syncora.config import settings

# Create rate limiter instance
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri="memory://",
    headers_enabled=True,  # Include rate limit headers in responses
    enabled=settings.rate_limit_enabled,
)


def configure_rate_limiting(app):
    """
    Attach the limiter to the application.

    Rejections are rendered by the handler registered in
    ``register_exception_handlers``.
    """
    app.state.limiter = limiter
