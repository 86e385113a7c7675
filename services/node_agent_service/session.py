import functools
import threading

from shared.health_client import HeartbeatLoop, SessionClock, SessionState
from shared.logger_client import LoggerClient
from shared.ws_helper.client import ConnectionLost
from shared.ws_helper.message import FAIL, OK, Message, MessageDecodeError, build, error_result, loads, reply

from .handlers import handle_info, handle_ping

logger = LoggerClient(service_name="node_agent_service.session")


def default_handlers(cfg) -> dict:
    return {
        "ping": functools.partial(handle_ping, cfg),
        "info": functools.partial(handle_info, cfg),
    }


def spawn_thread(fn, *args):
    t = threading.Thread(target=fn, args=args, daemon=True)
    t.start()
    return t


class NodeSession:
    """
    One live connection: CONNECTING -> ACTIVE -> CLOSED.

    - open(): single connect attempt, raises ConnectionError
    - run(): init message, heartbeat, receive loop until the read fails
    """

    def __init__(self, cfg, client, handlers=None, spawn=spawn_thread):
        self.cfg = cfg
        self.client = client
        self.handlers = handlers if handlers is not None else default_handlers(cfg)
        self.spawn = spawn

        self.state = SessionState.CONNECTING
        self.clock = SessionClock()
        self.heartbeat = HeartbeatLoop(
            self._send_heartbeat,
            interval=cfg.heartbeat_interval,
            name=f"heartbeat-{cfg.sid}",
        )

        self._tasks = []
        self._tasks_lock = threading.Lock()

    # ---------- lifecycle ----------
    def open(self):
        self.state = SessionState.CONNECTING
        try:
            self.client.open()
        except ConnectionError:
            self.state = SessionState.CLOSED
            raise

        self.state = SessionState.ACTIVE
        self.clock.start()
        logger.info("connected to server", extra={"url": self.cfg.server_url, "sid": self.cfg.sid})

    def run(self):
        if self.state != SessionState.ACTIVE:
            raise RuntimeError(f"session is {self.state.value}, open() it first")

        try:
            self.client.send(build(self.cfg.node_type, self.cfg.sid))
            self.heartbeat.start()
            self._receive_loop()
        except ConnectionLost as e:
            logger.warn("connection lost", extra={"err": e})
        finally:
            self.heartbeat.stop()
            self.client.close()
            self.state = SessionState.CLOSED
            logger.info("session closed", extra={"uptime_sec": self.clock.uptime()})

    def close(self):
        self.client.close()

    def wait_handlers(self, timeout=None):
        with self._tasks_lock:
            tasks = list(self._tasks)
        for t in tasks:
            t.join(timeout)
        self._prune()

    # ---------- receive ----------
    def _receive_loop(self):
        while True:
            frame = self.client.recv()

            try:
                msg = loads(frame)
            except MessageDecodeError as e:
                logger.warn("cannot decode message", extra={"err": e})
                continue

            self.dispatch(msg)

    def dispatch(self, msg: Message):
        handler = self.handlers.get(msg.action or "")
        if handler is None:
            logger.debug("ignored message", extra={"action": msg.action, "code": msg.code})
            return None

        logger.info(f"dispatch {msg.action}", trace_id=msg.uid)
        task = self.spawn(self._run_handler, handler, msg)
        self._prune()
        if task is not None:
            with self._tasks_lock:
                self._tasks.append(task)
        return task

    def _run_handler(self, handler, msg: Message):
        try:
            code, result = handler(msg)
        except Exception as e:
            logger.error(f"{msg.action} handler crashed", trace_id=msg.uid, exc_info=True)
            code, result = FAIL, error_result(e)

        self._respond(msg, code, result)

    def _prune(self):
        with self._tasks_lock:
            self._tasks = [t for t in self._tasks if t.is_alive()]

    # ---------- send ----------
    def _respond(self, msg: Message, code, result):
        try:
            self.client.send(reply(msg, self.cfg.node_type, self.cfg.sid, code, result))
        except ConnectionLost as e:
            logger.warn(f"{msg.action} response dropped", trace_id=msg.uid, extra={"err": e})
            return False

        if code != OK:
            logger.info(f"{msg.action} replied with error", trace_id=msg.uid, extra={"code": code})
        return True

    def _send_heartbeat(self):
        self.client.send(build(self.cfg.node_type, self.cfg.sid, action="head", code=OK))
