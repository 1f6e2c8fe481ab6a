import logging

from core.composition import create_app
from core.config import get_settings
from core.logging import setup_logging

# Importing this module composes the application; configuration errors
# surface here, before any connection is attempted.
settings = get_settings()
setup_logging(settings)
logger = logging.getLogger(__name__)

app = create_app(settings)
logger.info("Composed %s (env=%s, database=%s)", settings.app_name, settings.env, settings.database.safe_url())
