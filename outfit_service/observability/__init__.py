# Observability module
from outfit_service.observability.logger import log_generation, is_logging_enabled
from outfit_service.observability.metrics import (
    increment,
    get_metrics,
    reset_metrics,
)
