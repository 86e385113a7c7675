from .heartbeat import HeartbeatLoop
from .status import SessionClock, SessionState

__all__ = ["HeartbeatLoop", "SessionClock", "SessionState"]
