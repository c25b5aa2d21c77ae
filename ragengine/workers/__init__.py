"""
Celery workers module.

Runs document ingestion in separate processes when
``CELERY_DISPATCH_MODE=celery``. Start a worker with:

    celery -A ragengine.workers worker -Q ingestion

Dependencies: celery, ragengine.configs
System role: Background task processing
"""

from celery import Celery

from ragengine.configs import get_settings

celery_config = get_settings().celery

celery_app = Celery(
    "ragengine",
    broker=celery_config.broker_url,
    backend=celery_config.result_backend_url,
    include=["ragengine.workers.tasks.document_ingestion"],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone=celery_config.timezone,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=celery_config.task_time_limit_seconds,
    worker_prefetch_multiplier=celery_config.worker_prefetch_multiplier,
    task_routes={"ragengine.ingest_document": {"queue": celery_config.ingestion_queue}},
)
