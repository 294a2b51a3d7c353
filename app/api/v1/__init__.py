from .appointment_router import *
from .directory_router import *
from .product_router import *
from .portal_router import *
