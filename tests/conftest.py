import os
import tempfile

# Config is read once at import time by main.py, so the environment has to be
# in place before any test module imports the app.
os.environ.update(
    {
        "APP_TITLE": "Clinic Schedule Gateway (tests)",
        "APP_VERSION": "0.1.0",
        "ENVIRONMENT": "development",
        "LOG_LEVEL": "INFO",
        "LOG_BACKEND": "console",
        "LOG_DIR": tempfile.mkdtemp(prefix="clinic-gateway-logs-"),
        "CLINIC_API_URL": "http://clinic.test",
        "CLINIC_API_TIMEOUT": "5",
        "UPSTREAM_SLOW_THRESHOLD_MS": "800",
        "CLINIC_TIMEZONE": "UTC",
    }
)

import pytest  # noqa: E402
from common.config import initialize_config  # noqa: E402
from app.services.v1 import clear_filter_cache  # noqa: E402

initialize_config()


@pytest.fixture(autouse=True)
def _fresh_filter_cache():
    clear_filter_cache()
    yield
    clear_filter_cache()
