import functools
import json
from decimal import Decimal
from typing import Callable

from chalice import Response

from menulib.constants.status_codes import http200, http400, http401, http404, http500
from menulib.utils.exceptions import ValidationException, RecordNotFound, AccessDenied, NotAuthorizedException
from menulib.utils.logger import logger, log_exception

SERVER_ERROR_MESSAGE = 'Server error'
JSON_HEADERS = {'Content-Type': 'application/json'}


class ResponseJSONEncoder(json.JSONEncoder):
    """
    DynamoDB returns numbers as Decimal, they go to clients as JSON numbers
    """

    def default(self, value):
        if isinstance(value, Decimal):
            return int(value) if value == value.to_integral_value() else float(value)
        return super(ResponseJSONEncoder, self).default(value)


def json_response(body: dict, status_code: int) -> Response:
    return Response(body=json.dumps(body, cls=ResponseJSONEncoder), status_code=status_code, headers=JSON_HEADERS)


def success_response(data=None, status_code: int = http200, **extra) -> Response:
    """
    {"success": true, "data": ...} envelope, extra keys (message, count, ...) go next to data
    """
    body = {'success': True, **extra}
    if data is not None:
        body['data'] = data
    return json_response(body, status_code)


def error_response(error: Exception, msg: str = "", status_code: int = http400, *args, **kwargs) -> Response:
    log_exception(error=error, msg=msg, status_code=status_code, *args, **kwargs)
    return json_response({'success': False, 'message': str(msg)}, status_code)


def request_exception_handler(func: Callable):
    @functools.wraps(func)
    def result(*args, **kwargs):
        try:
            logger.info(f'Calling function {func.__name__}')
            return func(*args, **kwargs)
        except ValidationException as validation_error:
            return error_response(error=validation_error, msg=str(validation_error), status_code=http400)
        except RecordNotFound as not_found:
            return error_response(error=not_found, msg=str(not_found), status_code=http404)
        except (AccessDenied, NotAuthorizedException) as access_denied:
            return error_response(error=access_denied, msg=str(access_denied) or 'Not authorized',
                                  status_code=http401)
        except Exception as exception:
            log_exception(exception, msg=f'function = {func.__name__}, error = {exception}', status_code=http500)
            return json_response({'success': False, 'message': SERVER_ERROR_MESSAGE}, http500)
    return result


def log_start_finish(func: Callable):
    @functools.wraps(func)
    def result(*args, **kwargs):
        logger.info(f'{func.__name__} ::: started')
        response = func(*args, **kwargs)
        logger.info(f'{func.__name__} ::: finished')
        return response
    return result
