# Config module
from outfit_service.config.settings import get_settings, reload_settings, Settings
