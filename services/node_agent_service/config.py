import os
import platform
from dataclasses import dataclass
from typing import Optional

from shared.config_loader import ConfigLoader

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "config.yaml")
ENV_PREFIX = "NODE_AGENT_"

TRUE_WORDS = {"1", "true", "yes", "on"}
FALSE_WORDS = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class AgentConfig:
    """Everything the agent needs, built once at startup."""

    sid: str
    node_type: str = "node"
    server_url: str = "ws://127.0.0.1:37550/ws"
    open_timeout: float = 10.0
    reconnect_interval: float = 5.0
    heartbeat_interval: float = 30.0
    status_url: str = "http://127.0.0.1:37549/api/serverinfo"
    status_username: str = "admin"
    status_password: str = "SQML"
    status_timeout: float = 6.0
    ping_count: int = 3
    ping_payload_size: int = 548
    ping_interval: float = 1.0
    ping_timeout: float = 2.0
    ping_privileged: bool = False
    log_level: str = "INFO"


def parse_sid(value) -> str:
    try:
        sid = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"sid must be an integer, got {value!r}") from None
    if sid <= 0:
        raise ValueError(f"sid must be a positive integer, got {sid}")
    return str(sid)


def resolve_privileged(value, system: Optional[str] = None) -> bool:
    if isinstance(value, bool):
        return value
    word = str(value if value is not None else "auto").strip().lower()
    if word == "auto":
        system = system or platform.system()
        return system == "Windows"
    if word in TRUE_WORDS:
        return True
    if word in FALSE_WORDS:
        return False
    raise ValueError(f"ping.privileged must be auto/true/false, got {value!r}")


def _number(loader, key, default, cast=float):
    raw = loader.get(key, default)
    try:
        value = cast(raw)
    except (TypeError, ValueError):
        raise ValueError(f"{key} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{key} must be positive, got {raw!r}")
    return value


def load_config(sid, path=DEFAULT_CONFIG_PATH, environ=None) -> AgentConfig:
    loader = ConfigLoader(path=path, env_prefix=ENV_PREFIX, environ=environ)
    d = AgentConfig(sid="0")

    level = str(loader.get("logging.level", d.log_level)).upper()
    if level not in ("DEBUG", "INFO", "WARN", "WARNING", "ERROR", "CRITICAL"):
        raise ValueError(f"logging.level: unknown level {level!r}")

    return AgentConfig(
        sid=parse_sid(sid),
        node_type=str(loader.get("service.node_type", d.node_type)),
        server_url=str(loader.get("server.url", d.server_url)),
        open_timeout=_number(loader, "server.open_timeout_sec", d.open_timeout),
        reconnect_interval=_number(loader, "server.reconnect_interval_sec", d.reconnect_interval),
        heartbeat_interval=_number(loader, "server.heartbeat_interval_sec", d.heartbeat_interval),
        status_url=str(loader.get("status.url", d.status_url)),
        status_username=str(loader.get("status.username", d.status_username)),
        status_password=str(loader.get("status.password", d.status_password)),
        status_timeout=_number(loader, "status.timeout_sec", d.status_timeout),
        ping_count=_number(loader, "ping.count", d.ping_count, cast=int),
        ping_payload_size=_number(loader, "ping.payload_size", d.ping_payload_size, cast=int),
        ping_interval=_number(loader, "ping.interval_sec", d.ping_interval),
        ping_timeout=_number(loader, "ping.timeout_sec", d.ping_timeout),
        ping_privileged=resolve_privileged(loader.get("ping.privileged", "auto")),
        log_level="WARNING" if level == "WARN" else level,
    )
