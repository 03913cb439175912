import functools
import os
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import jwt

from menulib.constants.constants import ADMIN_ROLE
from menulib.constants.status_codes import http401
from menulib.utils.app import error_response
from menulib.utils.exceptions import NotAuthorizedException, AccessDenied
from menulib.utils.logger import logger

TOKEN_TTL_HOURS = 24


def jwt_secret() -> str:
    secret = os.environ.get('JWT_SECRET')
    if not secret:
        raise NotAuthorizedException('Authentication is not configured')
    return secret


def jwt_algorithm() -> str:
    return os.environ.get('JWT_ALGORITHM', 'HS256')


def get_token(headers) -> str:
    """
    "Bearer <token>" or a bare token
    """
    header = (headers.get('authorization') or '').strip()
    if not header:
        raise NotAuthorizedException('Not authorized, no token')
    scheme, _, token = header.partition(' ')
    if scheme.lower() == 'bearer':
        header = token.strip()
    if not header:
        raise NotAuthorizedException('Not authorized, no token')
    return header


def decode_token(token: str) -> Dict:
    try:
        return jwt.decode(token, jwt_secret(), algorithms=[jwt_algorithm()])
    except jwt.PyJWTError as error:
        logger.warning(f'decode_token ::: {error=}')
        raise NotAuthorizedException('Not authorized, token failed')


def auth_result_from_claims(claims: Dict) -> Dict:
    user_id = claims.get('sub')
    if not user_id:
        raise NotAuthorizedException('Not authorized, token failed')
    is_admin = claims.get('role') == ADMIN_ROLE or claims.get('is_admin') is True
    if not is_admin:
        raise AccessDenied('Not authorized as an admin')
    return {'user_id': user_id, 'role': ADMIN_ROLE}


def create_access_token(user_id: str, role: str = ADMIN_ROLE, expires_in: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        'sub': user_id,
        'role': role,
        'iat': now,
        'exp': now + (expires_in or timedelta(hours=TOKEN_TTL_HOURS))
    }
    return jwt.encode(payload, jwt_secret(), algorithm=jwt_algorithm())


def authenticate(func):
    """
    Wrapper for functions which require an admin's token, the request is the first argument
    """

    @functools.wraps(func)
    def result_auth(*args, **kwargs):
        request = args[0]
        try:
            claims = decode_token(get_token(request.headers))
            setattr(request, 'auth_result', auth_result_from_claims(claims))
        except (NotAuthorizedException, AccessDenied) as err:
            logger.error(f"authenticate ::: {func.__name__} {err}")
            return error_response(err, msg=str(err), status_code=http401)
        logger.info(f"authenticate ::: SUCCESS, func.__name__ {func.__name__}, "
                    f"user_id={request.auth_result['user_id']}")
        return func(*args, **kwargs)

    return result_auth
