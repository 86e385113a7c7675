from .config import AgentConfig, load_config
from .session import NodeSession
from .supervisor import Supervisor

__all__ = ["AgentConfig", "NodeSession", "Supervisor", "load_config"]
