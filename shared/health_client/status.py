from enum import Enum
import time


class SessionState(str, Enum):
    CONNECTING = "CONNECTING"
    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"


class SessionClock:
    def __init__(self):
        self.start_time = None

    def start(self):
        self.start_time = time.monotonic()

    def uptime(self):
        if self.start_time is None:
            return 0
        return int(time.monotonic() - self.start_time)
