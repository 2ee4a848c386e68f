from hubkit.helpers.factory import create_message
from hubkit.helpers.validation import validate_message

__all__ = [
    "create_message",
    "validate_message",
]
