from .appointment_schemas import *
from .directory_schemas import *
from .view_schemas import *
from .notification_schemas import *
from .inventory_schemas import *
from .portal_schemas import *
