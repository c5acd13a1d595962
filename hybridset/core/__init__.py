"""
Core module - Contains configuration, logging, errors and primitive capabilities.
"""

from hybridset.core.config import HybridSetConfig
from hybridset.core.logging import get_secure_logger, SecureLogFilter

__all__ = ["HybridSetConfig", "get_secure_logger", "SecureLogFilter"]
