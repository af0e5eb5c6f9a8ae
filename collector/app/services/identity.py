"""Client identity resolution from proxy headers."""

from typing import Mapping

FORWARDED_FOR_HEADER = "x-forwarded-for"
REAL_IP_HEADER = "x-real-ip"
UNKNOWN_IDENTITY = "unknown"


def resolve_client_identity(headers: Mapping[str, str]) -> str:
    """Derive a best-effort client identity from request headers.

    Uses the first address in X-Forwarded-For, then X-Real-IP, then
    the literal ``"unknown"``.

    Args:
        headers: Request headers. Starlette ``Headers`` are matched
            case-insensitively; plain dicts should use lower-case names.

    Returns:
        Identity string, never empty
    """
    forwarded = headers.get(FORWARDED_FOR_HEADER)
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = headers.get(REAL_IP_HEADER)
    if real_ip and real_ip.strip():
        return real_ip

    return UNKNOWN_IDENTITY
