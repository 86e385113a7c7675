import time

import icmplib
import requests
from requests.auth import HTTPBasicAuth

from shared.logger_client import LoggerClient
from shared.ws_helper.message import FAIL, OK, Message, RawResult, error_result

logger = LoggerClient(service_name="node_agent_service.handlers")


def handle_ping(cfg, msg: Message, pinger=None, resolve=None):
    """
    Ping ``msg.ip`` with ICMP echo requests.

    Returns ``(code, result)``:
      - (200, "<avg ms>ms")
      - (500, {"error": "..."}) on lookup/socket errors or when every echo is lost
    """
    pinger = pinger or icmplib.ping
    resolve = resolve or icmplib.resolve
    host = msg.ip

    logger.info(f"pinging {host}", trace_id=msg.uid)

    # ---- setup ----
    if not host:
        logger.error("ping setup failed: missing ip", trace_id=msg.uid)
        return FAIL, error_result("missing target ip")

    try:
        addresses = resolve(host)
    except (icmplib.ICMPLibError, OSError) as e:
        logger.error("ping setup failed", trace_id=msg.uid, extra={"ip": host, "err": e})
        return FAIL, error_result(str(e) or f"cannot resolve {host}")

    if not addresses:
        logger.error("ping setup failed: no address", trace_id=msg.uid, extra={"ip": host})
        return FAIL, error_result(f"cannot resolve {host}")
    address = addresses[0]

    # ---- echo ----
    try:
        stats = pinger(
            address,
            count=cfg.ping_count,
            interval=cfg.ping_interval,
            timeout=cfg.ping_timeout,
            payload_size=cfg.ping_payload_size,
            privileged=cfg.ping_privileged,
        )
    except (icmplib.ICMPLibError, OSError) as e:
        logger.error("ping failed", trace_id=msg.uid, extra={"ip": host, "err": e})
        return FAIL, error_result(e)

    if not stats.packets_received:
        logger.error("ping failed: no reply", trace_id=msg.uid, extra={"ip": host})
        return FAIL, error_result(f"no reply from {host}: {cfg.ping_count} packets lost")

    latency = f"{int(stats.avg_rtt)}ms"
    logger.info(f"{host} ping: {latency}", trace_id=msg.uid)
    return OK, latency


def read_body(resp, deadline, clock=time.monotonic, chunk_size=8192) -> bytes:
    """Read a streamed body, giving up once ``deadline`` (a ``clock()`` value) passes."""
    chunks = []
    for chunk in resp.iter_content(chunk_size=chunk_size):
        chunks.append(chunk)
        if clock() > deadline:
            raise requests.Timeout("timed out")
    return b"".join(chunks)


def handle_info(cfg, msg: Message, http_get=None, clock=time.monotonic):
    """
    Fetch the local server status document and pass the body through verbatim.

    ``status_timeout`` bounds the whole exchange, body read included.
    """
    http_get = http_get or requests.get
    deadline = clock() + cfg.status_timeout

    try:
        resp = http_get(
            cfg.status_url,
            auth=HTTPBasicAuth(cfg.status_username, cfg.status_password),
            timeout=cfg.status_timeout,
            stream=True,
        )
    except requests.RequestException as e:
        logger.error("status request failed", trace_id=msg.uid, extra={"err": e})
        return FAIL, error_result(e)

    try:
        body = read_body(resp, deadline, clock=clock)
    except requests.Timeout as e:
        logger.error("reading status body timed out", trace_id=msg.uid, extra={"err": e})
        return FAIL, error_result(e)
    except requests.RequestException as e:
        logger.error("reading status body failed", trace_id=msg.uid, extra={"err": e})
        return FAIL, error_result(f"reading response body failed: {e}")
    finally:
        resp.close()

    if not body:
        logger.info("status fetched (empty body)", trace_id=msg.uid, extra={"status": resp.status_code})
        return OK, None

    try:
        result = RawResult(body)
    except ValueError as e:
        logger.error("status body is not JSON", trace_id=msg.uid, extra={"err": e})
        return FAIL, error_result(f"response body is not valid JSON: {e}")

    logger.info("status fetched", trace_id=msg.uid, extra={"status": resp.status_code, "bytes": len(body)})
    return OK, result
