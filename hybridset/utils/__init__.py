"""
Utility modules.
"""

from hybridset.utils.validators import ValidationError, validate_bytes

__all__ = ["ValidationError", "validate_bytes"]
