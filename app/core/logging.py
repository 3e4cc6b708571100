import logging
import sys

from .config import settings

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)],
)
# httpx logs every request at INFO, including the webhook URL which embeds the Bitrix secret
logging.getLogger('httpx').setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the `iris` namespace"""
    if not name.startswith('iris'):
        name = f'iris.{name}'
    return logging.getLogger(name)
