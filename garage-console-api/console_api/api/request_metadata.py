# console_api/api/request_metadata.py
from flask import request

from console_api.core.device import describe_user_agent
from console_api.entities.auth import DeviceMetadata


def get_client_ip() -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr or "unknown"


def get_device_metadata() -> DeviceMetadata:
    user_agent = request.headers.get("User-Agent", "") or ""
    return DeviceMetadata(
        ip_address=get_client_ip()[:45],
        user_agent=user_agent or "unknown",
        device_info=describe_user_agent(user_agent),
    )
