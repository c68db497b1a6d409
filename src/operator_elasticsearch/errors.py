"""
Exception classes for Elasticsearch cluster operations.

Every operation in this package either returns a typed result or raises one
of these. Nothing is logged and swallowed, and a failed mutation never
reports partial success.

- TransportError: The request never produced an HTTP response
- BadStatusError: Elasticsearch answered with a non-2xx status
- MalformedResponseError: The response body had an unexpected shape
- DegenerateComputationError: A recovery ETA cannot be computed

Per project patterns:
- Inherit from a common base for callers that want a single except clause
- Store context data in attributes for error handling
- Include descriptive message with relevant details
"""


class ElasticsearchOperatorError(Exception):
    """Base class for all errors raised by operator-elasticsearch."""


class TransportError(ElasticsearchOperatorError):
    """
    Raised when a request fails before an HTTP response is received.

    Covers connection refusal, DNS failure, and timeouts. These are never
    retried automatically; retrying an idempotent read is the caller's call.

    Attributes:
        method: HTTP method of the failed request
        path: Request path relative to the cluster base URL
    """

    def __init__(self, method: str, path: str, reason: str) -> None:
        self.method = method
        self.path = path
        super().__init__(f"{method} {path} failed: {reason}")


class BadStatusError(ElasticsearchOperatorError):
    """
    Raised when Elasticsearch returns a non-2xx HTTP status.

    The raw response body is kept verbatim since Elasticsearch puts the
    actionable reason (e.g. illegal_argument_exception) there.

    Attributes:
        status_code: HTTP status code of the response
        body: Raw response body text
    """

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Bad HTTP Status from Elasticsearch: {status_code}, {body}")


class MalformedResponseError(ElasticsearchOperatorError):
    """
    Raised when a response body does not have the expected shape.

    Missing settings groups, invalid JSON and schema validation failures
    all land here. They are never replaced by defaults.

    Attributes:
        detail: What was missing or wrong
    """

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Malformed response from Elasticsearch: {detail}")


class DegenerateComputationError(ElasticsearchOperatorError):
    """
    Raised when a recovery time estimate has no meaningful value.

    Zero elapsed time, zero recovered bytes, and unparseable durations
    all make the throughput rate undefined or zero.

    Attributes:
        reason: Why the estimate is unknown
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Cannot estimate recovery time: {reason}")
