import threading

from websockets.exceptions import ConnectionClosed, WebSocketException
from websockets.sync.client import connect

from .message import Message, dumps


class ConnectionLost(ConnectionError):
    """Raised when the websocket fails while reading or writing."""


class WSClient:
    """One websocket connection to the coordination server.

    Every write goes through a single lock so the heartbeat thread and the
    handler threads never interleave frames.
    """

    def __init__(self, url: str, open_timeout: float = 10):
        self.url = url
        self.open_timeout = open_timeout
        self._conn = None
        self._write_lock = threading.Lock()

    def open(self):
        try:
            self._conn = connect(self.url, open_timeout=self.open_timeout)
        except (OSError, WebSocketException) as e:
            raise ConnectionError(f"cannot connect to {self.url}: {e}") from e

    def send(self, msg: Message):
        data = dumps(msg).decode("utf-8")

        with self._write_lock:
            if self._conn is None:
                raise ConnectionLost("not connected")
            try:
                self._conn.send(data)
            except (ConnectionClosed, OSError) as e:
                raise ConnectionLost(f"send failed: {e}") from e

    def recv(self):
        if self._conn is None:
            raise ConnectionLost("not connected")
        try:
            return self._conn.recv()
        except (ConnectionClosed, OSError) as e:
            raise ConnectionLost(str(e)) from e

    def close(self):
        conn = self._conn
        if conn is None:
            return
        try:
            conn.close()
        except (ConnectionClosed, OSError):
            pass
