# storefront/celery_worker.py
from celery import Celery

from storefront.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND

celery_app = Celery(
    "storefront",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

#import tasks explicitly so the worker registers them
celery_app.conf.imports = ("storefront.services.notification_service",)

celery_app.conf.update(
    timezone="UTC",
    task_serializer="json",
    accept_content=["json"],
    # confirmations are fire-and-forget, checkout never reads the result
    task_ignore_result=True,
    task_default_queue="notifications",
)
