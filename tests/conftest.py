import pytest

from fakes import GYM_CONFIG, FakeDB
from gymbooking.models.db_models import User

@pytest.fixture
def gym_config():
    return dict(GYM_CONFIG)

@pytest.fixture
def fake_db():
    return FakeDB()

@pytest.fixture
def member():
    return User(id="user-1", email="socio@example.com")
