import re

import pytest

from auth_service.core.errors import ValidationError
from auth_service.core.security import PasswordHasher

BCRYPT_PATTERN = re.compile(r"^\$2[aby]\$\d{2}\$[./A-Za-z0-9]{53}$")


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


def test_hash_is_salted_bcrypt_digest(hasher):
    first = hasher.hash("secretpass")
    second = hasher.hash("secretpass")

    assert first != "secretpass"
    assert BCRYPT_PATTERN.match(first)
    assert len(first) == 60
    assert first != second


def test_default_work_factor_is_ten():
    assert PasswordHasher().hash("secretpass").startswith("$2b$10$")


def test_hashers_keep_their_own_work_factor():
    fast = PasswordHasher(rounds=4)
    slow = PasswordHasher(rounds=5)

    assert fast.hash("secretpass").startswith("$2b$04$")
    assert slow.hash("secretpass").startswith("$2b$05$")
    assert fast.hash("secretpass").startswith("$2b$04$")


def test_verify_accepts_original_password(hasher):
    digest = hasher.hash("correct horse")

    assert hasher.verify("correct horse", digest) is True


def test_verify_rejects_other_password(hasher):
    digest = hasher.hash("correct horse")

    assert hasher.verify("battery staple", digest) is False


def test_verify_rejects_malformed_digest(hasher):
    assert hasher.verify("secretpass", "not-a-bcrypt-hash") is False
    assert hasher.verify("secretpass", "") is False


def test_secret_over_72_bytes_is_not_hashed(hasher):
    with pytest.raises(ValidationError):
        hasher.hash("a" * 72 + "X")
    # 37 two-byte characters
    with pytest.raises(ValidationError):
        hasher.hash("é" * 37)


def test_shared_72_byte_prefix_does_not_verify(hasher):
    digest = hasher.hash("a" * 72)

    assert hasher.verify("a" * 72, digest) is True
    assert hasher.verify("a" * 72 + "Y", digest) is False


async def test_each_application_has_its_own_hasher(settings, engine):
    from main import create_application

    fast = create_application(settings=settings, engine=engine)
    slow = create_application(
        settings=settings.model_copy(update={"BCRYPT_ROUNDS": 5}), engine=engine
    )

    assert fast.state.password_hasher is not slow.state.password_hasher
    assert fast.state.password_hasher.hash("secretpass").startswith("$2b$04$")
    assert slow.state.password_hasher.hash("secretpass").startswith("$2b$05$")
