from .loader import ConfigLoader, deep_merge

__all__ = ["ConfigLoader", "deep_merge"]
