from .logger import setup_logger
