"""
Authentication Middleware for the Creator Rankings backend
Firebase ID token validation for viewer and admin endpoints
"""

from functools import wraps
from flask import request
from firebase_admin import auth
import logging

from utils.error_handler import AuthenticationError, AuthorizationError, handle_error

logger = logging.getLogger(__name__)

def _extract_bearer_token():
    auth_header = request.headers.get('Authorization')
    if not auth_header:
        return None
    return auth_header.replace('Bearer ', '').strip() or None

def _has_admin_claim(decoded_token):
    if decoded_token.get('admin', False):
        return True
    custom_claims = decoded_token.get('custom_claims', {}) or {}
    return bool(custom_claims.get('admin', False))

def verify_request_token():
    """
    Decode the bearer token of the current request.
    Raises AuthenticationError when it is missing or rejected.
    """
    token = _extract_bearer_token()
    if not token:
        raise AuthenticationError('Authorization header required')

    try:
        return auth.verify_id_token(token)
    except auth.ExpiredIdTokenError:
        logger.warning("Expired token provided")
        raise AuthenticationError('Token expired')
    except auth.RevokedIdTokenError:
        logger.warning("Revoked token provided")
        raise AuthenticationError('Token revoked')
    except auth.InvalidIdTokenError:
        logger.warning("Invalid token provided")
        raise AuthenticationError('Invalid token')
    except Exception as e:
        logger.error(f"Authentication error: {str(e)}")
        raise AuthenticationError('Authentication failed')

def require_auth(f):
    """
    Decorator to require a valid Firebase ID token
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            request.current_user = verify_request_token()
        except AuthenticationError as e:
            return handle_error(e)

        return f(*args, **kwargs)

    return decorated_function

def require_admin(f):
    """
    Decorator to require admin privileges (admin claim or custom claim)
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            decoded_token = verify_request_token()
            if not _has_admin_claim(decoded_token):
                logger.warning(f"Non-admin user attempted admin action: {decoded_token.get('uid')}")
                raise AuthorizationError('Admin privileges required')
        except (AuthenticationError, AuthorizationError) as e:
            return handle_error(e)

        request.current_user = decoded_token
        return f(*args, **kwargs)

    return decorated_function
