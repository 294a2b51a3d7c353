from .api_error import *
from .config import *
from .context_vars import *
from .logger import get_app_logger, AppLogger, logger
