"""
API keys protecting the playground endpoints

Clients pass the key token in the X-API-Key header (cfr. Playground.API_KEY_HEADER).
Keys are created with the `flask playground-keys create` command and expire after
Playground.API_KEY_EXPIRATION_DAYS days by default.
"""
import datetime
import enum
import secrets
from typing import Optional
from sqlalchemy.orm.attributes import set_committed_value
import api_playground
from .config import get_config
from .errors import UnAuthorizedError
from .playground_init import DB

BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
MISSING_KEY = "API key is missing"
INVALID_KEY = "Invalid or expired API key"


def utcnow() -> datetime.datetime:
    # naive UTC, as stored by the DateTime columns
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def generate_token(length: Optional[int] = None) -> str:
    """
    :return: random base58 token
    """
    length = int(length or get_config("API_KEY_TOKEN_LENGTH"))
    return "".join(secrets.choice(BASE58_ALPHABET) for _ in range(length))


class TokenStatus(enum.Enum):
    VALID = "valid"
    EXPIRED = "expired"
    UNKNOWN = "unknown"


class ApiKey(DB.Model):
    """
    description: Playground API key
    """

    __tablename__ = "api_playground_api_keys"

    id = DB.Column(DB.Integer, primary_key=True)
    token = DB.Column(DB.String(64), nullable=False, unique=True, index=True)
    expires_at = DB.Column(DB.DateTime, nullable=False)
    last_used_at = DB.Column(DB.DateTime, nullable=True)
    created_at = DB.Column(DB.DateTime, nullable=False, default=utcnow)
    updated_at = DB.Column(DB.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<ApiKey {self.id} expires_at={self.expires_at}>"

    @classmethod
    def create(cls, expires_in_days: Optional[float] = None, token: Optional[str] = None) -> "ApiKey":
        """
        Create a key with a unique random token, the caller commits the session
        :param expires_in_days: validity period, defaults to API_KEY_EXPIRATION_DAYS
        :param token: use this token instead of a random one
        """
        if expires_in_days is None:
            expires_in_days = float(get_config("API_KEY_EXPIRATION_DAYS"))
        api_key = cls(token=token or cls.unique_token(), expires_at=utcnow() + datetime.timedelta(days=expires_in_days))
        DB.session.add(api_key)
        DB.session.flush()
        api_playground.log.info(f"Created api key {api_key.id}, expires at {api_key.expires_at}")
        return api_key

    @classmethod
    def unique_token(cls) -> str:
        max_attempts = int(get_config("API_KEY_MAX_ATTEMPTS"))
        for _ in range(max_attempts):
            token = generate_token()
            if cls.find_by_token(token) is None:
                return token
        raise RuntimeError(f"Failed to generate a unique api key token after {max_attempts} attempts")

    @classmethod
    def find_by_token(cls, token: str) -> Optional["ApiKey"]:
        return DB.session.query(cls).filter(cls.token == token).one_or_none()

    @classmethod
    def valid(cls):
        """
        :return: query for the keys that didn't expire yet
        """
        return DB.session.query(cls).filter(cls.expires_at > utcnow())

    @classmethod
    def valid_token(cls, token: str) -> bool:
        return cls.valid().filter(cls.token == token).first() is not None

    @classmethod
    def purge_expired(cls) -> int:
        """
        Delete the expired keys, the caller commits the session
        :return: number of deleted keys
        """
        return DB.session.query(cls).filter(cls.expires_at <= utcnow()).delete(synchronize_session=False)

    @property
    def expired(self) -> bool:
        return self.expires_at <= utcnow()

    def touch_last_used(self, commit: bool = True) -> None:
        """
        Store the last usage time without changing updated_at
        """
        now = utcnow()
        DB.session.query(ApiKey).filter(ApiKey.id == self.id).update(
            {ApiKey.last_used_at: now, ApiKey.updated_at: ApiKey.updated_at}, synchronize_session=False
        )
        set_committed_value(self, "last_used_at", now)
        if commit:
            DB.session.commit()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "token": self.token,
            "expires_at": self.expires_at,
            "last_used_at": self.last_used_at,
            "created_at": self.created_at,
            "expired": self.expired,
        }


def validate_token(token: Optional[str]) -> TokenStatus:
    """
    :param token: token sent by the client
    :return: TokenStatus.VALID, EXPIRED or UNKNOWN
    """
    if not token:
        return TokenStatus.UNKNOWN
    api_key = ApiKey.find_by_token(token)
    if api_key is None:
        return TokenStatus.UNKNOWN
    if api_key.expired:
        return TokenStatus.EXPIRED
    return TokenStatus.VALID


def check_api_key(token: Optional[str]) -> ApiKey:
    """
    :param token: value of the api key header
    :return: the valid api key, its last_used_at is updated
    :raises UnAuthorizedError: when the token is missing, unknown or expired
    """
    if token is None or not token.strip():
        raise UnAuthorizedError(MISSING_KEY)
    if validate_token(token) is not TokenStatus.VALID:
        raise UnAuthorizedError(INVALID_KEY)
    api_key = ApiKey.find_by_token(token)
    api_key.touch_last_used()
    return api_key
