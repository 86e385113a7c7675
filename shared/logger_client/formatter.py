from datetime import datetime, timezone


def format_log(level, service, message, trace_id=None, extra=None):
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": level,
        "service": service,
        "message": message,
        "trace_id": trace_id,
        "extra": extra or {},
    }


def render(record: dict) -> str:
    parts = [record["message"]]
    for k, v in record["extra"].items():
        parts.append(f"{k}={v}")
    if record.get("trace_id"):
        parts.append(f"trace={record['trace_id']}")
    return " ".join(parts)
