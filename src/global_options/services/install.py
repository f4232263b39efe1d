"""Schema bootstrap for the global options table."""

from __future__ import annotations

from ..infra.database import init_database, table_exists
from ..logging_config import get_logger
from ..models.option import AUTOLOAD_YES
from .options import OptionStore

logger = get_logger(__name__)

INSTALLED_OPTION = "installed"


def maybe_install(engine, options: OptionStore) -> bool:
    """Create the table if needed and record the ``installed`` flag once.

    Returns True when this call performed the installation.
    """
    if table_exists(engine) and options.get(INSTALLED_OPTION):
        return False

    if not table_exists(engine):
        init_database(engine)
        logger.info("Created options table")

    installed = options.add(INSTALLED_OPTION, "1", AUTOLOAD_YES)
    if installed:
        logger.info("Global options installed")
    return installed


__all__ = ["INSTALLED_OPTION", "maybe_install"]
