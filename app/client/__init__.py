from .api_client import *
from .token_store import *
from .deps import *
