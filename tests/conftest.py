import logging
import threading
from pathlib import Path

import pytest
import requests

from hello_app import app as flask_app
from hello_app.server import create_server

ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture
def client():
    flask_app.config["TESTING"] = True
    with flask_app.test_client() as client:
        yield client


@pytest.fixture
def live_server():
    """A real server on an ephemeral loopback port, served from a thread."""
    server = create_server("127.0.0.1", 0)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.shutdown()
    thread.join(timeout=5)


@pytest.fixture
def base_url(live_server):
    return f"http://127.0.0.1:{live_server.port}"


@pytest.fixture
def http():
    # talk to the loopback server directly, whatever proxies the environment sets
    with requests.Session() as session:
        session.trust_env = False
        yield session


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
