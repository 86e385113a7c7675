from .client import ConnectionLost, WSClient
from .message import (
    FAIL,
    OK,
    Message,
    MessageDecodeError,
    RawResult,
    build,
    dumps,
    error_result,
    loads,
    reply,
)
