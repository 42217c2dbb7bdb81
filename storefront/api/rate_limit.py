# storefront/api/rate_limit.py
import math

from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from storefront.api.errors import error_response
from storefront.domain.errors import RateLimitedError
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

API_PREFIX = "/api/"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Fixed window per client IP na sciezkach /api/.
    Limiter siedzi w app.state.rate_limiter, zeby dalo sie go podmienic.
    """

    async def dispatch(self, request: Request, call_next):
        if not request.url.path.startswith(API_PREFIX):
            return await call_next(request)

        limiter = request.app.state.rate_limiter
        client = request.client.host if request.client else "unknown"
        try:
            allowed, hit = limiter.check(client)
        except RedisError as e:
            # licznik niedostepny, przepuszczamy ruch
            logger.error(f"Rate limiter unavailable, allowing request: {e}")
            allowed, hit = True, None

        if not allowed:
            exc = RateLimitedError()
            return error_response(
                exc.status_code,
                exc.message,
                headers={"Retry-After": str(max(math.ceil(hit.reset_in), 1))},
            )

        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if hit is not None:
            response.headers["X-RateLimit-Remaining"] = str(max(limiter.max_requests - hit.count, 0))
        return response
