from datetime import UTC, datetime
from email.utils import format_datetime


class CopyConditions:
    """Preconditions for a server-side object copy.

    Dates are stored as HTTP dates in GMT. Naive datetimes are taken to be UTC.
    """

    def __init__(self) -> None:
        self.modified = ""
        self.unmodified = ""
        self.match_etag = ""
        self.match_etag_except = ""

    def set_modified(self, date: datetime) -> None:
        self.modified = _http_date(date)

    def set_unmodified(self, date: datetime) -> None:
        self.unmodified = _http_date(date)

    def set_match_etag(self, etag: str) -> None:
        self.match_etag = etag

    def set_match_etag_except(self, etag: str) -> None:
        self.match_etag_except = etag

    def headers(self) -> dict[str, str]:
        conditions = {
            "x-amz-copy-source-if-modified-since": self.modified,
            "x-amz-copy-source-if-unmodified-since": self.unmodified,
            "x-amz-copy-source-if-match": self.match_etag,
            "x-amz-copy-source-if-none-match": self.match_etag_except,
        }
        return {name: value for name, value in conditions.items() if value}


def _http_date(date: datetime) -> str:
    if not isinstance(date, datetime):
        raise TypeError("date must be of type datetime")
    if date.tzinfo is None:
        date = date.replace(tzinfo=UTC)
    return format_datetime(date.astimezone(UTC), usegmt=True)
