"""
Field validators return an error message for a bad value and None for a good one.
"""
from decimal import Decimal
from typing import Callable, Optional

Validator = Callable[[object], Optional[str]]


def string_field(label: str, required: bool = False, max_length: Optional[int] = None) -> Validator:
    def validate(value):
        if value is None or value == '':
            return f'{label} is required' if required else None
        if not isinstance(value, str):
            return f'{label} must be a string'
        if max_length is not None and len(value) > max_length:
            return f'{label} cannot exceed {max_length} characters'
        return None
    return validate


def number_field(label: str, required: bool = False, minimum=None, minimum_message: Optional[str] = None,
                 integer: bool = False) -> Validator:
    def validate(value):
        if value is None:
            return f'{label} is required' if required else None
        if isinstance(value, bool) or not isinstance(value, (int, Decimal)):
            return f'{label} must be a number'
        if integer and value != int(value):
            return f'{label} must be an integer'
        if minimum is not None and value < minimum:
            return minimum_message or f'{label} cannot be less than {minimum}'
        return None
    return validate


def bool_field(label: str) -> Validator:
    def validate(value):
        if not isinstance(value, bool):
            return f'{label} must be true or false'
        return None
    return validate


def list_of_strings_field(label: str) -> Validator:
    def validate(value):
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            return f'{label} must be a list of strings'
        return None
    return validate
