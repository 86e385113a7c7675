import queue
import threading
import time

import pytest

from services.node_agent_service.config import AgentConfig
from shared.ws_helper.client import ConnectionLost
from shared.ws_helper.message import dumps, loads

CLOSE = object()


class FakeClient:
    """Stands in for WSClient: frames are fed through a queue, sent frames are recorded."""

    def __init__(self, frames=(), fail_open=False):
        self.inbox = queue.Queue()
        for f in frames:
            self.inbox.put(f)
        self.fail_open = fail_open
        self.opened = False
        self.closed = False
        self.frames = []
        self._lock = threading.Lock()

    def open(self):
        if self.fail_open:
            raise ConnectionError("connection refused")
        self.opened = True

    def feed(self, frame):
        self.inbox.put(frame)

    def hang_up(self):
        self.inbox.put(CLOSE)

    def send(self, msg):
        data = dumps(msg)
        with self._lock:
            if self.closed:
                raise ConnectionLost("closed")
            self.frames.append(data)

    def recv(self):
        try:
            item = self.inbox.get(timeout=5)
        except queue.Empty:
            raise ConnectionLost("no frame within 5s")
        if item is CLOSE:
            raise ConnectionLost("remote closed")
        return item

    def close(self):
        with self._lock:
            self.closed = True
        self.inbox.put(CLOSE)

    def sent(self, action=None):
        with self._lock:
            frames = list(self.frames)
        msgs = [loads(f) for f in frames]
        if action is None:
            return msgs
        return [m for m in msgs if m.action == action]


def wait_for(predicate, timeout=5.0, interval=0.01):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


def run_inline(fn, *args):
    fn(*args)


@pytest.fixture
def cfg():
    return AgentConfig(sid="7")
