from .clock import *
from .status_machine import *
from .appointment_filter import *
from .calendar_adapter import *
from .queue_partitioner import *
from .notifier import *
from .payloads import *
from .directory_service import *
from .appointment_service import *
from .product_service import *
from .portal_service import *
