# fulfillment/tasks/context.py
from celery.signals import worker_process_init, worker_process_shutdown

from fulfillment.celery_worker import celery_app
from fulfillment.data.database import SessionLocal
from fulfillment.services.email_client import EmailClient
from fulfillment.services.invoice_renderer import InvoiceRenderer
from fulfillment.services.invoice_service import InvoiceProcessor
from fulfillment.services.job_queue import JobQueue
from fulfillment.services.notification_service import RealtimePublisher
from fulfillment.services.storage_service import ObjectStorage
from fulfillment.utils.logging import get_logger

logger = get_logger(__name__)


class WorkerContext:
    """
    Zaleznosci taskow w jednym procesie workera.
    Budowane po forku (worker_process_init), zamykane na worker_process_shutdown.
    """

    def __init__(
        self,
        session_factory=None,
        publisher=None,
        job_queue=None,
        storage=None,
        renderer=None,
        email_client=None,
    ):
        self.session_factory = session_factory or SessionLocal
        self.publisher = publisher or RealtimePublisher()
        self.job_queue = job_queue or JobQueue(celery_app)
        self.email_client = email_client or EmailClient()
        self.invoices = InvoiceProcessor(
            session_factory=self.session_factory,
            renderer=renderer or InvoiceRenderer(),
            storage=storage or ObjectStorage(),
            publisher=self.publisher,
            job_queue=self.job_queue,
        )

    def init(self):
        self.publisher.init()
        self.job_queue.init()

    def shutdown(self):
        self.job_queue.shutdown()
        self.publisher.shutdown()


_context: WorkerContext | None = None


def set_worker_context(context: WorkerContext | None):
    global _context
    _context = context


def get_worker_context() -> WorkerContext:
    global _context
    if _context is None:
        # pool solo/threads nie odpala worker_process_init
        _context = WorkerContext()
        _context.init()
    return _context


@worker_process_init.connect
def _init_worker_context(**kwargs):
    context = WorkerContext()
    context.init()
    set_worker_context(context)
    logger.info("Worker context ready")


@worker_process_shutdown.connect
def _shutdown_worker_context(**kwargs):
    global _context
    if _context is not None:
        _context.shutdown()
        _context = None
        logger.info("Worker context closed")
