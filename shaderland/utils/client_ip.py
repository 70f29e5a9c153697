# shaderland/utils/client_ip.py
# Best-effort client address from proxy headers (Cloudflare first, then standard ones)

from __future__ import annotations

import re
from typing import Mapping, Optional

_FORWARDED_FOR_RE = re.compile(r"for=([^;,\s]+)", re.IGNORECASE)


def get_client_ip(headers: Mapping[str, str], peer: Optional[str] = None) -> Optional[str]:
    """Return the originating client IP, or the socket peer when no header names one."""
    cf_ip = headers.get("cf-connecting-ip")
    if cf_ip:
        return cf_ip.strip()

    forwarded_for = headers.get("x-forwarded-for")
    if forwarded_for:
        # May list a chain of proxies; the client is first
        return forwarded_for.split(",")[0].strip()

    real_ip = headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    forwarded = headers.get("forwarded")
    if forwarded:
        match = _FORWARDED_FOR_RE.search(forwarded)
        if match:
            ip = match.group(1).replace('"', "")
            if ip.startswith("["):
                # RFC 7239 IPv6: "[2001:db8::1]:4711"
                return ip[1:].split("]")[0]
            # strip an IPv4 port
            return ip.split(":")[0] if ip.count(":") == 1 else ip

    return peer
