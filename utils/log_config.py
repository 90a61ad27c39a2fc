
from utils.logger import logger_manager, log_function

# Shared entry point: modules import ``logger_manager`` / ``log_function`` from here
# and create their own logger with ``logger_manager.setup_logger(__name__)``.
log_function = log_function

logger = logger_manager.setup_logger("sniper")
