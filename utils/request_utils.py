"""
Recipe Share Request Utilities
Helper functions for extracting request information
"""

import ipaddress
from typing import Optional

from fastapi import Request

SESSION_HEADER = "x-session-id"


def get_client_ip(request: Request) -> str:
    """
    Extract client IP address from request headers

    Handles various proxy configurations and cloud load balancers
    """
    # Check common proxy headers in order of preference
    headers_to_check = [
        "cf-connecting-ip",  # Cloudflare
        "x-forwarded-for",   # Standard proxy header
        "x-real-ip",         # Nginx proxy
    ]

    for header in headers_to_check:
        ip = request.headers.get(header)
        if ip:
            # X-Forwarded-For can contain multiple IPs, take the first (original client)
            if "," in ip:
                ip = ip.split(",")[0].strip()

            if _is_valid_ip(ip):
                return ip

    # Fallback to direct connection IP
    if request.client and request.client.host:
        return request.client.host

    return "127.0.0.1"


def get_user_agent(request: Request) -> str:
    """Extract user agent from request headers"""
    return request.headers.get("user-agent", "Unknown")


def get_session_id(request: Request) -> Optional[str]:
    """Guest chat session token, if the client sent one"""
    value = request.headers.get(SESSION_HEADER)
    if value:
        value = value.strip()
    return value or None


def _is_valid_ip(ip: str) -> bool:
    try:
        ipaddress.ip_address(ip)
        return True
    except ValueError:
        return False
