import json
from dataclasses import dataclass, fields
from typing import Any, Optional

OK = 200
FAIL = 500

STRING_FIELDS = ("type", "sid", "action", "ip", "uid")


class MessageDecodeError(ValueError):
    pass


def _reject_constant(name):
    raise ValueError(f"non-standard JSON constant {name}")


class RawResult:
    """Already-encoded JSON value, written into the frame byte-for-byte."""

    __slots__ = ("data",)

    def __init__(self, data):
        if isinstance(data, str):
            data = data.encode("utf-8")
        data = bytes(data)
        # validate only, the bytes are kept as they came
        try:
            json.loads(data.decode("utf-8"), parse_constant=_reject_constant)
        except RecursionError:
            raise ValueError("JSON nested too deeply") from None
        self.data = data

    def __eq__(self, other):
        return isinstance(other, RawResult) and other.data == self.data

    def __repr__(self):
        return f"RawResult({self.data!r})"


@dataclass
class Message:
    type: Optional[str] = None
    sid: Optional[str] = None
    action: Optional[str] = None
    ip: Optional[str] = None
    uid: Optional[str] = None
    code: Optional[int] = None
    result: Any = None

    def to_dict(self) -> dict:
        out = {}
        for f in fields(self):
            v = getattr(self, f.name)
            if v is None:
                continue
            if f.name == "action" and v == "":
                continue
            out[f.name] = v
        return out


def build(node_type, sid, action=None, ip=None, uid=None, code=None, result=None) -> Message:
    return Message(
        type=node_type,
        sid=sid,
        action=action,
        ip=ip,
        uid=uid,
        code=code,
        result=result,
    )


def reply(request: Message, node_type, sid, code, result=None) -> Message:
    return build(
        node_type,
        sid,
        action=request.action,
        uid=request.uid,
        code=code,
        result=result,
    )


def error_result(text) -> dict:
    return {"error": str(text)}


def dumps(msg: Message) -> bytes:
    doc = msg.to_dict()
    raw = doc.pop("result", None) if isinstance(msg.result, RawResult) else None

    text = json.dumps(doc, ensure_ascii=False, separators=(",", ":"))
    if raw is None:
        return text.encode("utf-8")

    head = text[:-1].encode("utf-8")
    sep = b"," if doc else b""
    return head + sep + b'"result":' + raw.data + b"}"


def loads(data) -> Message:
    try:
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("utf-8")
        doc = json.loads(data)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MessageDecodeError(f"invalid JSON: {e}") from e
    except RecursionError:
        raise MessageDecodeError("invalid JSON: nested too deeply") from None

    if not isinstance(doc, dict):
        raise MessageDecodeError(f"expected JSON object, got {type(doc).__name__}")

    for key in STRING_FIELDS:
        v = doc.get(key)
        if v is not None and not isinstance(v, str):
            raise MessageDecodeError(f"field {key!r} must be a string")

    code = doc.get("code")
    if code is not None and (isinstance(code, bool) or not isinstance(code, int)):
        raise MessageDecodeError("field 'code' must be an integer")

    return Message(
        type=doc.get("type"),
        sid=doc.get("sid"),
        action=doc.get("action"),
        ip=doc.get("ip"),
        uid=doc.get("uid"),
        code=code,
        result=doc.get("result"),
    )
