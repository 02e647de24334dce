import logging
from datetime import datetime, timedelta

import pytest

from app import create_app
from config import TestConfig
from models import db
from notifier import LOGGER_NAME
from prober import Outcome
from scheduler import Monitor
from store import SiteStore
from tracker import FailureTracker


class FakeClock:
    def __init__(self, start=None):
        self.now = start or datetime(2024, 1, 1, 12, 0, 0)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


class FakeProber:
    """Returns queued outcomes per URL, then the default."""

    def __init__(self, default=Outcome.UP):
        self.default = default
        self.queued = {}
        self.calls = []

    def queue(self, url, *outcomes):
        self.queued.setdefault(url, []).extend(outcomes)

    def __call__(self, url):
        self.calls.append(url)
        pending = self.queued.get(url)
        if pending:
            return pending.pop(0)
        return self.default


class FakeRunner:
    def __init__(self, result=True):
        self.result = result
        self.commands = []

    def __call__(self, command):
        self.commands.append(command)
        return self.result


@pytest.fixture(autouse=True)
def _capture_info(caplog):
    logger = logging.getLogger(LOGGER_NAME)
    propagate = logger.propagate
    logger.propagate = True
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)
    yield
    logger.propagate = propagate


@pytest.fixture
def app():
    app = create_app(TestConfig)
    ctx = app.app_context()
    ctx.push()
    yield app
    monitor = app.extensions['uptime_monitor']
    monitor.stop()
    db.session.remove()
    ctx.pop()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return SiteStore()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def prober():
    return FakeProber()


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def tracker(runner):
    return FailureTracker(runner)


@pytest.fixture
def monitor(store, tracker, prober, clock):
    return Monitor(store, tracker, prober, clock=clock)
