from .config_data import Settings
from .config_loader import load_settings

__all__ = ["Settings", "load_settings"]
