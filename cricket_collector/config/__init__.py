from cricket_collector.config.config import ConfigError, Settings, resolve

__all__ = ["ConfigError", "Settings", "resolve"]
