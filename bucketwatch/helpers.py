from urllib.parse import quote

# Region used when neither the client nor the AWS config chain provides one
DEFAULT_REGION = "us-east-1"

# RFC 3986 unreserved characters, everything else gets percent-encoded
_UNRESERVED = "-._~"


def uri_escape(value: str) -> str:
    """Percent-encode a value for use inside a URL query component."""
    return quote(value, safe=_UNRESERVED)
