from .request_timer import RequestTimer
from .middleware_types import *
from .logger_middleware import *
