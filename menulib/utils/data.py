import json
import os
import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from email.message import Message
from typing import Any, Dict, List, Optional, Tuple

from requests_toolbelt.multipart.decoder import MultipartDecoder, ImproperBodyPartContentException, \
    NonMultipartContentTypeException

from menulib.utils.exceptions import ValidationException
from menulib.utils.logger import logger

TRUE_STRINGS = ('true',)
FALSE_STRINGS = ('false',)
MAX_INTEGER_DIGITS = 38
INTEGER_PATTERN = re.compile(r'[+-]?[0-9]{1,38}')


def replace_dict_key(item, orig_key, new_key):
    if orig_key in item:
        if new_key not in item:
            item[new_key] = item[orig_key]
        del item[orig_key]


def substitute_keys(dict_to_process: dict, base_keys: dict, opt_dict=None):
    if opt_dict is None:
        opt_dict = {}
    all_keys = {**base_keys, **opt_dict}
    for key, val in all_keys.items():
        if val:
            replace_dict_key(dict_to_process, key, val)
        elif key in dict_to_process.keys():
            dict_to_process.pop(key, None)


def max_upload_size_mb() -> int:
    return int(os.environ.get('MAX_UPLOAD_SIZE_MB', '5'))


def parse_request_body(chalice_request) -> Tuple[Dict, Optional[bytes]]:
    """
    Returns request fields and the bytes of an uploaded `image` file (None if there is no file).
    JSON and multipart/form-data bodies are supported.
    """
    raw_body = chalice_request.raw_body
    if not raw_body:
        return {}, None
    if len(raw_body) > max_upload_size_mb() * 1024 * 1024:
        raise ValidationException(f'File too large, max size is {max_upload_size_mb()}MB')
    content_type = chalice_request.headers.get('content-type', '')
    if content_type.lower().startswith('multipart/form-data'):
        return parse_multipart_request_data(raw_body, content_type)
    try:
        body = json.loads(raw_body)
    except ValueError:
        raise ValidationException('Request body is not a valid JSON')
    if not isinstance(body, dict):
        raise ValidationException('Request body must be a JSON object')
    return fix_values_from_ui(item=body), None


def get_disposition_params(part) -> Tuple[Optional[str], Optional[str]]:
    message = Message()
    message['content-disposition'] = part.headers.get(b'Content-Disposition', b'').decode()
    return message.get_param('name', header='content-disposition'), \
        message.get_param('filename', header='content-disposition')


def parse_multipart_request_data(raw_body: bytes, content_type: str) -> Tuple[Dict, Optional[bytes]]:
    try:
        parts = MultipartDecoder(raw_body, content_type).parts
    except (ImproperBodyPartContentException, NonMultipartContentTypeException) as error:
        logger.warning(f'parse_multipart_request_data ::: {error=}')
        raise ValidationException('Request body is not a valid multipart/form-data')

    fields = {}
    image_content = None
    for part in parts:
        name, filename = get_disposition_params(part)
        if not name:
            continue
        if filename is not None:
            if name == 'image' and filename:
                image_content = part.content
            continue
        value = part.text
        if name in fields:
            previous = fields[name]
            fields[name] = (previous if isinstance(previous, list) else [previous]) + [value]
        else:
            fields[name] = value
    return fields, image_content or None


def fix_values_from_ui(item):
    """
    Remove keys with empty or None values and transform float to Decimal
    """
    if item.get('_values_from_ui_strategy') == 'delete_empty':
        list_to_cleanup = ['', None]
    else:
        list_to_cleanup = [None]
    item = cleanup_dict(item, list_to_cleanup)
    item.pop('_values_from_ui_strategy', None)
    result = json.dumps(item)
    return json.loads(result, parse_float=Decimal)


def cleanup_dict(item: dict, list_of_values: list):
    """ Remove None fields in dict with. Supports one nesting.  """

    def sub_clean(sub_item):
        return {
            key: value
            for key, value in sub_item.items()
            if value not in list_of_values
        }

    clean = {}
    for k, v in item.items():
        if isinstance(v, dict):
            nested = sub_clean(v)
            if len(nested.keys()) > 0:
                clean[k] = nested
        elif v not in list_of_values:
            clean[k] = v
    return clean


def to_str(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError(f'{value!r} is not a string')
    return value.strip()


def to_iso_date(value: Any) -> str:
    try:
        return datetime.fromisoformat(to_str(value)).isoformat()
    except (TypeError, ValueError):
        raise ValueError(f'{value!r} is not an ISO date')


def to_bool(value: Any) -> bool:
    """
    Form fields carry booleans as "true"/"false" strings
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in TRUE_STRINGS:
        return True
    if isinstance(value, str) and value.strip().lower() in FALSE_STRINGS:
        return False
    raise ValueError(f'{value!r} is not a boolean')


def to_decimal(value: Any, exp: str = '1.00') -> Decimal:
    if isinstance(value, bool):
        raise ValueError(f'{value!r} is not a number')
    try:
        number = Decimal(str(value).strip()) if isinstance(value, (str, float)) else Decimal(value)
        if not number.is_finite():
            raise ValueError(f'{value!r} is not a number')
        return number.quantize(Decimal(exp))
    except (InvalidOperation, TypeError):
        raise ValueError(f'{value!r} is not a number')


def to_int(value: Any) -> int:
    """
    Integer text ("12", "-3") or an integral number, DynamoDB keeps up to 38 digits
    """
    if isinstance(value, bool):
        raise ValueError(f'{value!r} is not an integer')
    if isinstance(value, str):
        if not INTEGER_PATTERN.fullmatch(value.strip()):
            raise ValueError(f'{value!r} is not an integer')
        return int(value.strip())
    if not isinstance(value, (int, float, Decimal)):
        raise ValueError(f'{value!r} is not an integer')
    number = Decimal(value)
    if not number.is_finite() or number.adjusted() >= MAX_INTEGER_DIGITS or number != number.to_integral_value():
        raise ValueError(f'{value!r} is not an integer')
    return int(number)


def parse_json_field(value: Any):
    if isinstance(value, str):
        return json.loads(value, parse_float=Decimal)
    return value


def parse_tags(value: Any) -> List[str]:
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.startswith('['):
            value = json.loads(stripped)
        else:
            value = stripped.split(',')
    if not isinstance(value, (list, tuple)):
        raise ValueError(f'{value!r} is not a list of tags')
    tags = [str(tag).strip() for tag in value]
    return list(dict.fromkeys(tag for tag in tags if tag))
