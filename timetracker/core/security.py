"""
Security utilities for JWT authentication and password hashing
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Union, Any
from joserfc import jwt as jose_jwt
from joserfc.jwk import OctKey
from joserfc.errors import BadSignatureError, DecodeError, ExpiredTokenError, InvalidTokenError
from pwdlib import PasswordHash
from pwdlib.hashers.bcrypt import BcryptHasher
import structlog

from timetracker.core.config import settings
from timetracker.core.exceptions import NotAuthenticated

logger = structlog.get_logger()

pwd_context = PasswordHash((BcryptHasher(),))

ALGORITHM = settings.JWT_ALGORITHM
SECRET_KEY = settings.JWT_SECRET_KEY
ISSUER = settings.AUTH_ISSUER
ACCESS_TOKEN_EXPIRE_MINUTES = settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES
REFRESH_TOKEN_EXPIRE_DAYS = settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS

_jwt_key = OctKey.import_key(SECRET_KEY)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _encode(subject: Union[str, Any], token_type: str, expire: datetime, extra: Optional[dict] = None) -> str:
    to_encode = {
        "exp": int(expire.timestamp()),
        "sub": str(subject),
        "type": token_type,
        "iss": ISSUER,
        "iat": int(_utcnow().timestamp()),
    }
    if extra:
        # Identity claims only; authorization state is always re-read from the database
        to_encode.update({k: v for k, v in extra.items() if k not in ("role", "permissions")})
    return jose_jwt.encode({"alg": ALGORITHM}, to_encode, _jwt_key)


def create_access_token(
    subject: Union[str, Any],
    expires_delta: Optional[timedelta] = None,
    additional_claims: Optional[dict] = None
) -> str:
    """Short-lived token identifying a user; role claims in additional_claims are dropped"""
    expire = _utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    encoded_jwt = _encode(subject, "access", expire, additional_claims)

    logger.debug("Access token created", subject=str(subject), expires=expire.isoformat())
    return encoded_jwt


def create_refresh_token(
    subject: Union[str, Any],
    expires_delta: Optional[timedelta] = None
) -> str:
    expire = _utcnow() + (expires_delta or timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS))
    encoded_jwt = _encode(subject, "refresh", expire)

    logger.debug("Refresh token created", subject=str(subject), expires=expire.isoformat())
    return encoded_jwt


def verify_token(token: str, token_type: str = "access") -> str:
    """
    Return the user id a token was issued for.

    Raises NotAuthenticated for malformed, expired, foreign-issuer or
    wrong-type tokens.
    """
    try:
        token_obj = jose_jwt.decode(token, _jwt_key, algorithms=[ALGORITHM])
    except (BadSignatureError, DecodeError, ExpiredTokenError, InvalidTokenError, ValueError) as exc:
        logger.warning("JWT verification failed", error=str(exc))
        raise NotAuthenticated("Could not validate credentials")

    payload = token_obj.claims

    if payload.get("type") != token_type:
        logger.warning("Invalid token type", expected=token_type, actual=payload.get("type"))
        raise NotAuthenticated("Invalid token type")

    if payload.get("iss") != ISSUER:
        logger.warning("Token issuer is not trusted", issuer=payload.get("iss"))
        raise NotAuthenticated("Untrusted token issuer")

    subject = payload.get("sub")
    if not subject:
        logger.warning("Token missing subject")
        raise NotAuthenticated("Invalid token: missing subject")

    exp = payload.get("exp")
    if not exp or _utcnow().timestamp() > exp:
        logger.warning("Token expired", subject=subject)
        raise NotAuthenticated("Token expired")

    logger.debug("Token verified successfully", subject=subject, type=token_type)
    return str(subject)


def _bcrypt_input(password: str) -> str:
    password_bytes = password.encode("utf-8")
    if len(password_bytes) > 72:
        return password_bytes[:72].decode("utf-8", errors="ignore")
    return password


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify a password against its hash; users without a local password never match"""
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(_bcrypt_input(plain_password), hashed_password)
    except Exception as e:
        logger.error("Password verification error", error=str(e))
        return False


def get_password_hash(password: str) -> str:
    """
    Hash a password

    Bcrypt only considers the first 72 bytes, so longer passwords are truncated
    before hashing.
    """
    if len(password.encode("utf-8")) > 72:
        logger.warning("Password truncated to 72 bytes for bcrypt")

    return pwd_context.hash(_bcrypt_input(password))
