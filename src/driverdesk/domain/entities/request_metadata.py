"""Network and client metadata attached to security audit entries."""

from collections.abc import Mapping
from dataclasses import dataclass

UNKNOWN = "unknown"

# Checked in priority order; the first non-empty header wins.
CLIENT_IP_HEADERS = ("x-forwarded-for", "x-real-ip")


@dataclass(frozen=True)
class RequestMetadata:
    """Client address and user agent of the request that triggered an action.

    Attributes:
        ip_address: Best-effort real client address, or "unknown".
        user_agent: User-Agent header value, or "unknown".
    """

    ip_address: str = UNKNOWN
    user_agent: str = UNKNOWN

    @classmethod
    def from_headers(
        cls,
        headers: Mapping[str, str],
        peer_host: str | None = None,
    ) -> "RequestMetadata":
        """Build metadata from request headers.

        Proxy headers are checked before the socket peer address. For
        X-Forwarded-For only the first hop (the original client) is used.

        Args:
            headers: Case-insensitive request header mapping.
            peer_host: Address of the directly connected peer, if known.

        Returns:
            RequestMetadata for the request.
        """
        ip_address = None
        for header in CLIENT_IP_HEADERS:
            value = headers.get(header)
            if value:
                ip_address = value.split(",")[0].strip()
                if ip_address:
                    break
        if not ip_address:
            ip_address = peer_host or UNKNOWN

        user_agent = headers.get("user-agent") or UNKNOWN
        return cls(ip_address=ip_address, user_agent=user_agent)

    @classmethod
    def from_request(cls, request) -> "RequestMetadata":
        """Build metadata from a Starlette/FastAPI request object."""
        peer_host = request.client.host if request.client else None
        return cls.from_headers(request.headers, peer_host)


# Used for operations started outside HTTP requests (CLI, sweeps).
SYSTEM_METADATA = RequestMetadata(ip_address=UNKNOWN, user_agent="driverdesk-system")
