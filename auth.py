from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from config import get_settings


class InvalidToken(Exception):
    pass


def _serializer() -> URLSafeTimedSerializer:
    settings = get_settings()
    return URLSafeTimedSerializer(settings.secret_key, salt="lifeboard-session")


def issue_token(user_id: str) -> str:
    if not user_id:
        raise ValueError("user_id is required")
    return _serializer().dumps({"sub": user_id})


def verify_token(token: str) -> str:
    settings = get_settings()
    try:
        data = _serializer().loads(
            token, max_age=settings.token_max_age_hours * 3600
        )
    except SignatureExpired as exc:
        raise InvalidToken("Session expired") from exc
    except BadSignature as exc:
        raise InvalidToken("Invalid session token") from exc

    user_id = data.get("sub") if isinstance(data, dict) else None
    if not isinstance(user_id, str) or not user_id:
        raise InvalidToken("Session token has no subject")
    return user_id
