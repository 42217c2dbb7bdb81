# storefront/tasks/stock_alerts.py
from storefront.celery_worker import celery_app
from storefront.data.database import SessionLocal
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(name="storefront.tasks.stock_alerts.report_low_stock_task")
def report_low_stock_task():
    logger.info("Low stock report started")

    db = SessionLocal()
    try:
        products = ProductRepo(db).low_stock()
        logger.info(f"Found {len(products)} low stock products")

        for p in products:
            logger.warning(
                f"[LOW STOCK] {p.sku} '{p.name}': {p.quantity} left "
                f"(threshold {p.low_stock_threshold})"
            )
        return [{"id": p.id, "sku": p.sku, "quantity": p.quantity} for p in products]
    finally:
        db.close()
