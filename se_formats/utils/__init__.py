from .config import load_config, configure_logging, DEFAULTS

__all__ = ['load_config', 'configure_logging', 'DEFAULTS']
