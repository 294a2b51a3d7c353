"""
Active log backends, chosen by LOG_BACKEND:

    LOG_BACKEND=file      # weekly JSON files under LOG_DIR (default ./logs)
    LOG_BACKEND=console   # console only, persisted entries are discarded
"""

import threading
from typing import Any, Callable, Dict, List
from common.config import EnvLogBackends, LoggingConfig, get_config, is_config_initialized
from .base import LogBackend
from .file_backend import FileBackend

BackendFactory = Callable[[LoggingConfig], List[LogBackend]]

_BACKEND_REGISTRY: Dict[str, BackendFactory] = {
    EnvLogBackends.FILE.value: lambda cfg: [FileBackend(cfg.resolved_log_dir)],
    EnvLogBackends.CONSOLE.value: lambda cfg: [],
}

_active_backends: List[LogBackend] = []
_backends_initialized = False
_lock = threading.Lock()


def _initialize_backends() -> None:
    global _backends_initialized, _active_backends

    with _lock:
        if _backends_initialized:
            return
        if not is_config_initialized():
            # Nothing to persist to until startup has loaded the config.
            return

        logging_config = get_config().logging
        factory = _BACKEND_REGISTRY[logging_config.log_backend.value]
        _active_backends = factory(logging_config)
        _backends_initialized = True


def get_active_backends() -> List[LogBackend]:
    if not _backends_initialized:
        _initialize_backends()
    return _active_backends


def get_all_metrics() -> Dict[str, Any]:
    return {backend.name: backend.get_metrics() for backend in get_active_backends()}


__all__ = [
    "get_active_backends",
    "get_all_metrics",
]
