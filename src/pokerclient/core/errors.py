"""Client error taxonomy.

Every failure the client can surface derives from ClientError so the session
boundary can catch one type and route it to a single notice.
"""


class ClientError(Exception):
    """Base class for all client-side failures."""


class MalformedMessage(ClientError):
    """Inbound frame could not be decoded or failed payload validation."""

    def __init__(self, reason: str, raw: str | None = None):
        self.reason = reason
        self.raw = raw
        super().__init__(reason)


class ValidationError(ClientError):
    """Local input rejected before any network call."""


class ServerRejection(ClientError):
    """Server refused a request (room creation or an inbound error message)."""


class TransportError(ClientError):
    """Network failure while connecting or sending."""


class ConnectionLost(ClientError):
    """Transport closed while a room was active. Not recoverable."""
