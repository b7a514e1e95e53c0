from __future__ import annotations

import logging
import socket
from typing import Optional

from zeroconf import IPVersion, ServiceInfo, Zeroconf

from .config import API_PORT, ENABLE_MDNS, INSTANCE_PREFIX, SERVICE_TYPE

logger = logging.getLogger(__name__)

zeroconf: Optional[Zeroconf] = None
service_info: Optional[ServiceInfo] = None
_mdns_enabled = ENABLE_MDNS


def set_mdns_enabled(value: bool) -> None:
    global _mdns_enabled
    _mdns_enabled = bool(value)


def get_local_ip() -> str:
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
            s.connect(("8.8.8.8", 80))
            return s.getsockname()[0]
    except OSError:
        return "127.0.0.1"


def build_service_info(server_id: str | None, port: int = API_PORT) -> ServiceInfo:
    hostname = socket.gethostname()
    instance_name = f"{INSTANCE_PREFIX}-{hostname}.{SERVICE_TYPE}"
    properties = {
        b"path": b"/api",
        b"proto": b"1",
        b"server_id": (server_id or "").encode("utf-8"),
    }
    return ServiceInfo(
        type_=SERVICE_TYPE,
        name=instance_name,
        addresses=[socket.inet_aton(get_local_ip())],
        port=port,
        properties=properties,
    )


def register_mdns_service(server_id: str | None, port: int = API_PORT) -> None:
    global zeroconf, service_info
    if not _mdns_enabled:
        return
    try:
        zeroconf = Zeroconf(ip_version=IPVersion.V4Only)
        service_info = build_service_info(server_id, port)
        zeroconf.register_service(service_info)
        logger.info("Advertised %s on port %s", service_info.name, port)
    except Exception:  # noqa: BLE001
        # Discovery is optional; the API keeps serving without it.
        logger.exception("mDNS registration failed")
        if zeroconf:
            zeroconf.close()
        zeroconf = None
        service_info = None


def unregister_mdns_service() -> None:
    global zeroconf, service_info
    if not _mdns_enabled:
        return
    if zeroconf:
        if service_info:
            zeroconf.unregister_service(service_info)
        zeroconf.close()
    zeroconf = None
    service_info = None
