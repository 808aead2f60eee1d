# storefront/tasks/cleanup.py
from typing import List

from sqlalchemy.orm import Session

from storefront.celery_worker import celery_app
from storefront.data.database import SessionLocal
from storefront.repos.cart_repo import CartRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def purge_cart_lines(db: Session, user_id: int, ordered: List[List[int]]) -> int:
    repo = CartRepo(db)
    removed = repo.release_lines(user_id, {line_id: quantity for line_id, quantity in ordered})
    repo.commit()
    logger.info(f"Purged {removed} stale cart lines for user {user_id}")
    return removed


def sweep_stale_carts(db: Session) -> int:
    repo = CartRepo(db)
    stale = repo.stale_lines()
    logger.info(f"Found {len(stale)} stale cart lines")

    by_user = {}
    for line in stale:
        by_user.setdefault(line.user_id, []).append(line.id)

    removed = 0
    for user_id, line_ids in by_user.items():
        removed += repo.delete_lines(user_id, line_ids)
    repo.commit()
    return removed


@celery_app.task(name="storefront.tasks.cleanup.purge_cart_lines_task")
def purge_cart_lines_task(user_id: int, ordered: List[List[int]]):
    db = SessionLocal()
    try:
        return purge_cart_lines(db, user_id, ordered)
    finally:
        db.close()


@celery_app.task(name="storefront.tasks.cleanup.sweep_stale_carts_task")
def sweep_stale_carts_task():
    logger.info("Sweep stale carts task started")

    db = SessionLocal()
    try:
        return sweep_stale_carts(db)
    finally:
        db.close()
