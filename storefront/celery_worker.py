# storefront/celery_worker.py
from celery import Celery

from storefront.utils.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    QUOTATION_EXPIRY_INTERVAL_SECONDS,
)

celery_app = Celery(
    "storefront",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# taski importowane jawnie, inaczej worker ich nie zarejestruje
celery_app.conf.imports = ("storefront.tasks.expire",)

celery_app.conf.beat_schedule = {
    "expire-quotations": {
        "task": "storefront.tasks.expire.expire_quotations_task",
        "schedule": QUOTATION_EXPIRY_INTERVAL_SECONDS,
    },
}

celery_app.conf.timezone = "UTC"
