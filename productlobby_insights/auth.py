"""Session-token authentication for API requests"""
import logging
from typing import Optional

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from productlobby_insights.models.db import User, UserSession, utcnow

logger = logging.getLogger(__name__)

SESSION_COOKIE = 'session_token'

def extract_session_token(cookies: dict, authorization: Optional[str]) -> Optional[str]:
    """Session token from the cookie, falling back to an ``Authorization: Bearer`` header"""
    token = cookies.get(SESSION_COOKIE)
    if token:
        return token

    if authorization:
        scheme, _, credentials = authorization.partition(' ')
        if scheme.lower() == 'bearer' and credentials.strip():
            return credentials.strip()
    return None

def get_current_user(session: Session, token: Optional[str]) -> Optional[User]:
    """
    Resolve the user behind a session token.

    Returns:
        The signed-in User, or None for a missing, unknown or expired token
    """
    if not token:
        return None

    try:
        user_session = session.query(UserSession).filter_by(token=token).first()
    except SQLAlchemyError as e:
        logger.error(f"Database error resolving session: {e}")
        raise

    if user_session is None:
        return None
    if user_session.expires_at <= utcnow():
        logger.info(f"Rejected expired session for user {user_session.user_id}")
        return None
    return user_session.user
