"""
Logging setup shared by the API process and maintenance scripts.
"""
import logging

from tripledger.core.config import settings

_configured = False


def configure_logging(level: str = None) -> None:
    """Configure the root logger once; later calls are no-ops."""
    global _configured
    if _configured:
        return
    
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    _configured = True
