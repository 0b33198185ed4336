"""
Startup checks run once when the server process boots.
"""
import logging

from django.conf import settings
from django.db import DatabaseError, connection

logger = logging.getLogger(__name__)


def check_database():
    """Refuse to serve traffic without a reachable database."""
    try:
        connection.ensure_connection()
    except DatabaseError as e:
        logger.critical(
            "database_unreachable",
            extra={"error": str(e), "error_type": type(e).__name__},
        )
        raise
    logger.info("database_connected", extra={"operation": "startup", "status": settings.APP_ENV})
