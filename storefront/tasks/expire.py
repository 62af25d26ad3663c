# storefront/tasks/expire.py
from storefront.celery_worker import celery_app
from storefront.data import database
from storefront.services.quotation_service import QuotationService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(name="storefront.tasks.expire.expire_quotations_task")
def expire_quotations_task() -> int:
    logger.info("Expire quotations task started")

    db = database.SessionLocal()
    try:
        expired = QuotationService(db).expire_overdue()
        logger.info(f"Expired {expired} quotations")
        return expired
    finally:
        db.close()
