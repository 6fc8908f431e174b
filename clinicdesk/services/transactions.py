import functools

from clinicdesk.adapters.sqlite.core import db_lock
from clinicdesk.common.errors import ClinicError
from clinicdesk.services.activity_logger import log_failure


def synchronized(method):
    """Run a read under the store lock."""
    @functools.wraps(method)
    def wrapped(self, *args, **kwargs):
        with db_lock:
            return method(self, *args, **kwargs)

    return wrapped


def transactional(operation: str):
    """
    Run a write under the store lock in one transaction.

    Clinic errors roll the transaction back, are recorded in the activity
    log and then re-raised to the caller.
    """
    def decorator(method):
        @functools.wraps(method)
        def wrapped(self, *args, **kwargs):
            with db_lock:
                try:
                    with self.db:
                        return method(self, *args, **kwargs)
                except ClinicError as e:
                    log_failure(operation, e, db=self.db)
                    raise

        return wrapped

    return decorator
