import uuid

import redis
from redis.exceptions import RedisError

from storefront.domain.errors import StoreUnavailable
from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

#LUA porownaj i usun, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis wykonuje skrypt lua atomowo, nikt nie wcisnie sie miedzy GET a DEL
#wiec zwalniamy tylko swoj wlasny lock


class LockService:
    """
    -blokada checkoutu uzytkownika (jeden materialize naraz)
    -zwalnianie locka tylko przez wlasciciela tokenu
    """

    def __init__(self, url: str | None = None, client=None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @staticmethod
    def checkout_key(user_id: int) -> str:
        return f"checkout:{user_id}:lock"

    @redis_retry()
    def _set_nx(self, key: str, token: str, ttl: int) -> bool:
        #SET checkout:1:lock "<token>" NX EX 30
        return bool(self.redis.set(name=key, value=token, nx=True, ex=ttl))

    @redis_retry()
    def _release(self, key: str, token: str) -> bool:
        return bool(self.redis.eval(_RELEASE_LUA, 1, key, token))

    def acquire_checkout_lock(self, user_id: int, ttl: int) -> str | None:
        """Zwraca token locka albo None gdy checkout juz trwa."""
        key = self.checkout_key(user_id)
        token = uuid.uuid4().hex
        logger.info(f"Acquire lock {key}")
        try:
            locked = self._set_nx(key, token, ttl)
        except RedisError as e:
            logger.error(f"Lock backend unavailable: {e}")
            raise StoreUnavailable("Lock service unavailable") from e
        return token if locked else None

    def release_checkout_lock(self, user_id: int, token: str) -> bool:
        key = self.checkout_key(user_id)
        logger.info(f"Release lock {key}")
        try:
            return self._release(key, token)
        except RedisError as e:
            # lock i tak wygasnie po TTL
            logger.warning(f"Failed to release {key}: {e}")
            return False
