from stationmap.configs.logging_init import initialize_loggers, logger
from stationmap.configs.settings_models import Settings

# Settings
# Overwrite priority: environment variables > default values
settings = Settings()

# Initialize the logger with the verbosity level from settings
initialize_loggers(verbose_level=settings.logging.verbosity_level)

logger.debug(settings)
