"""Error taxonomy shared by the middleware and the client pipeline."""


class HiveFetcherError(Exception):
    """Base error carrying a human-readable message and optional debug SQL."""

    def __init__(self, message: str, debug_sql: str | None = None):
        super().__init__(message)
        self.message = message
        self.debug_sql = debug_sql


class InvalidSearchRequest(HiveFetcherError):
    """Malformed or missing request fields, rejected before any store access (HTTP 400)."""

    def __init__(self, message: str):
        super().__init__(message)


class QueryExecutionError(HiveFetcherError):
    """The content store rejected or failed the generated statement (HTTP 500)."""


class TransportError(HiveFetcherError):
    """No usable HTTP response reached the client."""


class ClientPrecheckError(HiveFetcherError):
    """A client-side guard failed; the request never reached the network."""

    def __init__(self, message: str):
        super().__init__(message)
