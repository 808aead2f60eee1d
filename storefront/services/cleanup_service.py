# storefront/services/cleanup_service.py
from typing import Mapping

from storefront.tasks.cleanup import purge_cart_lines_task
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartCleanupService:
    """
    Planuje zdjecie z koszyka sztuk, ktore zostaly po zamowieniu.
    Uzywa Celery do asynchronicznego przetwarzania.
    """

    def schedule_purge(self, user_id: int, ordered: Mapping[int, int]):
        logger.info(f"Scheduling purge of {len(ordered)} stale cart lines for user {user_id}")
        # JSON nie ma kluczy int, dlatego pary [line_id, quantity]
        purge_cart_lines_task.delay(user_id, [[line_id, quantity] for line_id, quantity in ordered.items()])
