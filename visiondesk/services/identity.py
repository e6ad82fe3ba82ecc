"""Identity provider - password hashing, bearer token issue and verification."""
import logging
from datetime import datetime, timezone

import jwt
from flask import current_app
from werkzeug.security import generate_password_hash, check_password_hash

from visiondesk.errors import MissingToken, InvalidToken, InvalidCredentials
from visiondesk.models import User
from visiondesk.services.policy import Caller

logger = logging.getLogger('visiondesk.identity')

REQUIRED_CLAIMS = ('id', 'email', 'role')


def hash_password(password):
    return generate_password_hash(password)


def verify_password(password_hash, password):
    if not password_hash or not isinstance(password, str):
        return False
    return check_password_hash(password_hash, password)


def issue_token(user):
    """Sign a token carrying ``{id, email, role}`` that expires after JWT_EXPIRATION."""
    now = datetime.now(timezone.utc)
    payload = {
        'id': user.id,
        'email': user.email,
        'role': user.role,
        'iat': now,
        'exp': now + current_app.config['JWT_EXPIRATION'],
    }
    return jwt.encode(
        payload,
        current_app.config['JWT_SECRET_KEY'],
        algorithm=current_app.config['JWT_ALGORITHM'],
    )


def decode_token(token):
    try:
        payload = jwt.decode(
            token,
            current_app.config['JWT_SECRET_KEY'],
            algorithms=[current_app.config['JWT_ALGORITHM']],
            options={'require': ['exp']},
        )
    except jwt.PyJWTError as e:
        logger.info('Rejected token: %s', e)
        raise InvalidToken() from e

    if any(claim not in payload for claim in REQUIRED_CLAIMS):
        raise InvalidToken()
    return payload


def parse_bearer(authorization):
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        raise MissingToken()
    scheme, _, token = authorization.partition(' ')
    token = token.strip()
    if scheme.lower() != 'bearer' or not token:
        raise MissingToken()
    return token


def authenticate(authorization, store):
    """Verify the bearer header and return the calling identity.

    Role and company are read from the user row, so a role change or
    deactivation takes effect before the token expires.
    """
    payload = decode_token(parse_bearer(authorization))
    user = store.find(User, payload['id'])
    if user is None or not user.is_active:
        raise InvalidToken()
    return Caller(
        id=user.id,
        email=user.email,
        role=user.role,
        company_id=user.company_id,
    )


def login(email, password, store):
    """Check credentials and return ``(token, user)``."""
    users = store.list(User, User.email == email, User.is_active.is_(True))
    user = users[0] if users else None
    if user is None or not verify_password(user.password_hash, password):
        logger.info('Failed login for %s', email)
        raise InvalidCredentials()
    logger.info('User %s logged in', user.id)
    return issue_token(user), user
