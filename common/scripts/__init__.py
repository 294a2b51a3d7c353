from .get_date_range import *
