import logging
from contextlib import contextmanager

from storefront.extensions import db

logger = logging.getLogger(__name__)


@contextmanager
def transactional(session=None):
    """Yield a session that is committed on success, rolled back on any error."""
    session = session or db.session
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("Transaction rolled back", exc_info=True)
        raise
