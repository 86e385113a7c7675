import threading
import time

import pytest
from websockets.exceptions import ConnectionClosedError, InvalidURI

from shared.ws_helper import client as ws_client
from shared.ws_helper.client import ConnectionLost, WSClient
from shared.ws_helper.message import build


class FakeConnection:
    def __init__(self, frames=()):
        self.frames = list(frames)
        self.sent = []
        self.closed = False
        self.active = 0
        self.overlap = False

    def send(self, data):
        self.active += 1
        if self.active > 1:
            self.overlap = True
        time.sleep(0.001)
        self.sent.append(data)
        self.active -= 1

    def recv(self):
        if not self.frames:
            raise ConnectionClosedError(None, None)
        return self.frames.pop(0)

    def close(self):
        self.closed = True


@pytest.fixture
def fake_connect(monkeypatch):
    conns = []

    def connect(url, open_timeout=None):
        conn = FakeConnection(['{"action": "ping"}'])
        conns.append((url, open_timeout, conn))
        return conn

    monkeypatch.setattr(ws_client, "connect", connect)
    return conns


def test_open_send_recv(fake_connect):
    client = WSClient("ws://server/ws", open_timeout=3)
    client.open()

    url, timeout, conn = fake_connect[0]
    assert (url, timeout) == ("ws://server/ws", 3)

    client.send(build("node", "7"))
    assert conn.sent == ['{"type":"node","sid":"7"}']
    assert client.recv() == '{"action": "ping"}'


def test_recv_after_remote_close_raises_connection_lost(fake_connect):
    client = WSClient("ws://server/ws")
    client.open()
    client.recv()

    with pytest.raises(ConnectionLost):
        client.recv()


def test_send_before_open_raises_connection_lost():
    with pytest.raises(ConnectionLost):
        WSClient("ws://server/ws").send(build("node", "7"))


def test_connect_failure_is_connection_error(monkeypatch):
    def refuse(url, open_timeout=None):
        raise ConnectionRefusedError(111, "refused")

    monkeypatch.setattr(ws_client, "connect", refuse)
    with pytest.raises(ConnectionError):
        WSClient("ws://server/ws").open()


def test_bad_url_is_connection_error(monkeypatch):
    def invalid(url, open_timeout=None):
        raise InvalidURI(url, "not a websocket URI")

    monkeypatch.setattr(ws_client, "connect", invalid)
    with pytest.raises(ConnectionError):
        WSClient("http://server").open()


def test_concurrent_writers_never_overlap(fake_connect):
    client = WSClient("ws://server/ws")
    client.open()
    conn = fake_connect[0][2]

    def writer(n):
        for i in range(20):
            client.send(build("node", "7", action="head", code=200, uid=f"{n}-{i}"))

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(10)

    assert len(conn.sent) == 80
    assert not conn.overlap


def test_close(fake_connect):
    client = WSClient("ws://server/ws")
    client.close()
    client.open()
    client.close()
    assert fake_connect[0][2].closed
