"""
api/limiter.py -- The process-wide slowapi Limiter for EmpRecords.

api/main.py mounts it (app.state.limiter + SlowAPIMiddleware) and
api/routes/v1/auth.py decorates POST /login with it. Both must see this one
object: a Limiter keeps its own counter storage, so a second instance would
count login attempts separately and the limit would never trip.

Clients are keyed by remote address. Counters live in the storage named by
RATE_LIMIT_STORAGE_URI ("memory://" keeps them per process; point it at a
shared backend such as redis:// when running several workers).
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import get_settings

_settings = get_settings()

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=_settings.rate_limit_storage_uri,
    enabled=_settings.rate_limit_enabled,
)
