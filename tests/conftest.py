"""Shared fixtures for relay tests."""

import json
import uuid

import pytest

from server import Server


class FakeConnection:
    """In-memory stand-in for ``connection.Connection`` that records what the relay sends."""

    def __init__(self):
        self.connection_id = uuid.uuid4().hex[:8]
        self.on_message = lambda text: None
        self.on_close = lambda: None
        self.sent = []
        self.closed = False

    def send(self, message):
        if not self.closed:
            self.sent.append(json.loads(message.to_json()))

    def close(self):
        self.closed = True

    def detach(self):
        self.on_message = lambda text: None
        self.on_close = lambda: None

    def deliver(self, message):
        text = message if isinstance(message, str) else json.dumps(message)
        self.on_message(text)

    def disconnect(self):
        on_close = self.on_close
        self.detach()
        self.closed = True
        on_close()

    def pop_sent(self):
        sent, self.sent = self.sent, []
        return sent


@pytest.fixture
def make_connection():
    return FakeConnection


@pytest.fixture
def server():
    return Server()


@pytest.fixture
def join(server):
    """Connect a fake peer and send a join for ``room_id``."""

    def _join(room_id):
        conn = FakeConnection()
        server.on_connection(conn)
        conn.deliver({"type": "join", "roomId": room_id})
        return conn

    return _join
