import threading

from shared.logger_client import LoggerClient

logger = LoggerClient(service_name="heartbeat")


class HeartbeatLoop:
    def __init__(self, send_func, interval=30, name="heartbeat"):
        self.send_func = send_func
        self.interval = interval
        self.name = name
        self._stop = threading.Event()
        self._thread = None

    @property
    def running(self):
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name=self.name, daemon=True)
        self._thread.start()

    def stop(self, timeout=1.0):
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _loop(self):
        while not self._stop.is_set():
            try:
                self.send_func()
            except Exception as e:
                logger.warn("heartbeat send failed", extra={"err": e})
            if self._stop.wait(self.interval):
                break
