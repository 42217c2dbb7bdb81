# storefront/celery_worker.py
from celery import Celery

from storefront.utils.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    CELERY_TASK_ALWAYS_EAGER,
    LOW_STOCK_REPORT_SECONDS,
)

celery_app = Celery(
    "storefront",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# taski musza byc zaimportowane zeby Celery je zarejestrowal
celery_app.conf.imports = (
    "storefront.services.notification_service",
    "storefront.tasks.stock_alerts",
)

celery_app.conf.beat_schedule = {
    "low-stock-report": {
        "task": "storefront.tasks.stock_alerts.report_low_stock_task",
        "schedule": LOW_STOCK_REPORT_SECONDS,
    },
}

celery_app.conf.timezone = "UTC"
celery_app.conf.task_always_eager = CELERY_TASK_ALWAYS_EAGER
