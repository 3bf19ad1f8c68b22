import logging

from sqlmodel import Session

logger = logging.getLogger(__name__)


def commit_or_rollback(session: Session) -> None:
    """Commit, or roll back so the session stays usable for the rest of the request."""
    try:
        session.commit()
    except Exception as e:
        logger.error(f"Error committing session: {e}")
        session.rollback()
        raise
