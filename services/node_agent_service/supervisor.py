import threading

from shared.logger_client import LoggerClient
from shared.ws_helper.client import WSClient

from .session import NodeSession

logger = LoggerClient(service_name="node_agent_service.supervisor")


class Supervisor:
    """Keeps one session alive: connect, run, wait, repeat. Never gives up."""

    def __init__(self, cfg, client_factory=None, session_factory=NodeSession, sleep=None):
        self.cfg = cfg
        self.client_factory = client_factory or self._make_client
        self.session_factory = session_factory
        self._stop = threading.Event()
        self.sleep = sleep or self._stop.wait

        self.attempts = 0
        self.session = None

    def _make_client(self):
        return WSClient(self.cfg.server_url, open_timeout=self.cfg.open_timeout)

    @property
    def stopped(self):
        return self._stop.is_set()

    def stop(self):
        self._stop.set()
        session = self.session
        if session is not None:
            session.close()

    def run(self):
        logger.info("supervisor started", extra={"url": self.cfg.server_url, "sid": self.cfg.sid})

        while not self.stopped:
            self.run_once()
            if self.stopped:
                break
            logger.info(f"reconnecting in {self.cfg.reconnect_interval}s")
            self.sleep(self.cfg.reconnect_interval)

        logger.info("supervisor stopped", extra={"attempts": self.attempts})

    def run_once(self) -> bool:
        """One connect attempt plus the session it opens. True if it connected."""
        self.attempts += 1
        session = self.session_factory(self.cfg, self.client_factory())

        try:
            session.open()
        except ConnectionError as e:
            logger.error("connect failed", extra={"attempt": self.attempts, "err": e})
            return False

        self.session = session
        # stop() may have run while open() was dialling and seen no session
        if self.stopped:
            session.close()
        try:
            session.run()
        except Exception:
            logger.error("session crashed", extra={"attempt": self.attempts}, exc_info=True)
        finally:
            self.session = None
        return True
