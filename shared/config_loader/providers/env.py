import os


def load_from_env(prefix, environ=None):
    """Collect ``PREFIX_SECTION__KEY=value`` variables into a nested dict."""
    environ = os.environ if environ is None else environ
    result = {}

    for name, value in environ.items():
        if not name.startswith(prefix):
            continue

        path = [p.lower() for p in name[len(prefix):].split("__") if p]
        if not path:
            continue

        node = result
        for part in path[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = node[part] = {}
            node = child
        node[path[-1]] = value

    return result
