import uuid

from oneshare.app.core.security import generate_token


def test_message_tokens_are_uuid4():
    token = generate_token()
    assert str(uuid.UUID(token)) == token
    assert uuid.UUID(token).version == 4


def test_tokens_do_not_repeat():
    assert len({generate_token() for _ in range(1000)}) == 1000
