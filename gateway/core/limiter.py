"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules use the same
instance. Limit strings come from settings, resolved per request.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from gateway.core.config import get_settings

limiter = Limiter(key_func=get_remote_address)


def _login_limit() -> str:
    return get_settings().rate_limit_login


def _callback_limit() -> str:
    return get_settings().rate_limit_callback


def _upload_limit() -> str:
    return get_settings().rate_limit_upload


limit_login = limiter.limit(_login_limit)
limit_callback = limiter.limit(_callback_limit)
limit_upload = limiter.limit(_upload_limit)
