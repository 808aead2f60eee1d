# storefront/celery_worker.py
from celery import Celery

from storefront.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND, STALE_CART_SWEEP_SECONDS

celery_app = Celery(
    "storefront",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# taski musza byc zaimportowane explicite, zeby Celery je zarejestrowal
celery_app.conf.imports = (
    "storefront.tasks.cleanup",
)

celery_app.conf.beat_schedule = {
    "sweep-stale-carts": {
        "task": "storefront.tasks.cleanup.sweep_stale_carts_task",
        "schedule": STALE_CART_SWEEP_SECONDS,
    },
}

celery_app.conf.timezone = "UTC"
