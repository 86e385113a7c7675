import copy
import threading

from .providers.env import load_from_env
from .providers.file import load_from_file


def deep_merge(base: dict, override: dict) -> dict:
    out = copy.deepcopy(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = deep_merge(out[k], v)
        else:
            out[k] = v
    return out


class ConfigLoader:
    def __init__(self, path=None, env_prefix="", environ=None):
        self.path = path
        self.env_prefix = env_prefix
        self.environ = environ
        self._lock = threading.Lock()
        self._data = {}
        self.reload()

    def reload(self):
        with self._lock:
            data = {}

            # priority: low → high
            if self.path:
                data = deep_merge(data, load_from_file(self.path))
            if self.env_prefix:
                data = deep_merge(data, load_from_env(self.env_prefix, self.environ))

            self._data = data

    def get(self, key, default=None):
        """Look up a dotted key, e.g. ``get("server.url")``."""
        node = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def all(self):
        return copy.deepcopy(self._data)
