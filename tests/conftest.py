import pytest

from snowgen import TWITTER_EPOCH, create_app


class FakeClock:
    """A clock that only moves when told to."""

    def __init__(self, now):
        self.now = now
        self.reads = 0

    def __call__(self):
        self.reads += 1
        return self.now

    def advance(self, ms=1):
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock(TWITTER_EPOCH + 100)


@pytest.fixture
def app():
    return create_app("testing", {"SNOWFLAKE_DEFAULTS": "machine=7"})


@pytest.fixture
def client(app):
    return app.test_client()
