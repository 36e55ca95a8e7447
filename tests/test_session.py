import jwt
import pytest

from recruitboard.core.errors import Unauthorized
from recruitboard.services.session import SessionContext


def test_user_id_read_from_sub_claim() -> None:
    token = jwt.encode({"sub": "7"}, "secret", algorithm="HS256")
    session = SessionContext.from_access_token(token)
    assert session.user_id == 7
    assert session.access_token == token
    assert session.is_authenticated is True


def test_user_id_claim_takes_precedence() -> None:
    token = jwt.encode({"sub": "7", "userId": 12}, "secret", algorithm="HS256")
    assert SessionContext.from_access_token(token).user_id == 12


def test_explicit_user_id_skips_token_parsing() -> None:
    session = SessionContext()
    session.set("opaque-token", user_id=3)
    assert session.user_id == 3


def test_malformed_token_is_unauthorized() -> None:
    with pytest.raises(Unauthorized):
        SessionContext.from_access_token("not-a-jwt")


def test_token_without_user_claim_is_unauthorized() -> None:
    token = jwt.encode({"role": "member"}, "secret", algorithm="HS256")
    with pytest.raises(Unauthorized):
        SessionContext.from_access_token(token)


def test_clear_forgets_identity() -> None:
    session = SessionContext(access_token="t", user_id=4)
    session.clear()
    assert session.user_id is None
    assert session.access_token == ""
    assert session.is_authenticated is False
