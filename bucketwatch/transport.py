import logging
from collections.abc import AsyncIterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Protocol, final, runtime_checkable

import boto3
import httpx
from botocore.auth import S3SigV4Auth
from botocore.awsrequest import AWSRequest

from bucketwatch.config import ClientConfig
from bucketwatch.exceptions import TransportError
from bucketwatch.helpers import DEFAULT_REGION, uri_escape

logger = logging.getLogger(__name__)

# Listen responses stay open indefinitely, so there's no read timeout
DEFAULT_TIMEOUT = httpx.Timeout(connect=10.0, read=None, write=30.0, pool=30.0)


@final
@dataclass(frozen=True)
class RequestDescriptor:
    method: str
    bucket_name: str | None = None
    object_name: str | None = None
    query: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)


@runtime_checkable
class ResponseStream(Protocol):
    def __aiter__(self) -> AsyncIterator[bytes]: ...

    async def aclose(self) -> None: ...


class Transport(Protocol):
    """What the notification poller needs from a storage client."""

    region: str | None

    async def make_request(
        self,
        request: RequestDescriptor,
        payload: bytes = b"",
        expected_status: Sequence[int] = (200,),
        region: str | None = None,
        stream: bool = False,
    ) -> ResponseStream: ...


@final
class HttpResponseStream:
    """Body of an httpx response, read chunk by chunk as the server flushes it."""

    def __init__(self, response: httpx.Response):
        self.response = response

    @property
    def status_code(self) -> int:
        return self.response.status_code

    async def __aiter__(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self.response.aiter_bytes():
                yield chunk
        except httpx.HTTPError as e:
            raise TransportError(f"Reading {self.response.url} failed: {e}") from e

    async def read(self) -> bytes:
        return await self.response.aread()

    async def aclose(self) -> None:
        await self.response.aclose()


@final
class HttpTransport:
    """Path-style S3 transport on top of httpx.

    Requests are signed with botocore's S3 SigV4 signer when the boto3 session resolves
    credentials. Otherwise they go out unsigned.
    """

    def __init__(
        self,
        config: ClientConfig,
        client: httpx.AsyncClient | None = None,
        session: boto3.Session | None = None,
    ):
        self.config = config
        self._session = session or boto3.Session(
            profile_name=config.profile, region_name=config.region
        )
        self.region = config.region or self._session.region_name
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=DEFAULT_TIMEOUT, verify=config.verify)

    def build_url(self, request: RequestDescriptor) -> str:
        url = self.config.base_url
        if request.bucket_name:
            url = f"{url}/{uri_escape(request.bucket_name)}"
            if request.object_name:
                url = f"{url}/{'/'.join(uri_escape(p) for p in request.object_name.split('/'))}"
        if request.query:
            url = f"{url}?{request.query}"
        return url

    def _sign(
        self, method: str, url: str, headers: dict[str, str], payload: bytes, region: str
    ) -> dict[str, str]:
        credentials = self._session.get_credentials()
        if credentials is None:
            logger.debug("No AWS credentials found, sending anonymous %s %s", method, url)
            return headers

        aws_request = AWSRequest(method=method, url=url, data=payload, headers=headers)
        S3SigV4Auth(credentials.get_frozen_credentials(), "s3", region).add_auth(aws_request)
        logger.debug("Signed %s %s for region %s", method, url, region)
        return dict(aws_request.headers.items())

    async def make_request(
        self,
        request: RequestDescriptor,
        payload: bytes = b"",
        expected_status: Sequence[int] = (200,),
        region: str | None = None,
        stream: bool = False,
    ) -> HttpResponseStream:
        url = self.build_url(request)
        region = region or self.region or DEFAULT_REGION
        headers = self._sign(request.method, url, dict(request.headers), payload, region)

        http_request = self._client.build_request(
            request.method, url, headers=headers, content=payload or None
        )
        try:
            response = await self._client.send(http_request, stream=True)
        except httpx.HTTPError as e:
            raise TransportError(f"{request.method} {url} failed: {e}") from e

        if response.status_code not in expected_status:
            body = await response.aread()
            await response.aclose()
            raise TransportError(
                f"{request.method} {url} returned {response.status_code}, "
                f"expected one of {list(expected_status)}",
                status_code=response.status_code,
                body=body,
            )

        if not stream:
            await response.aread()
            await response.aclose()
        return HttpResponseStream(response)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpTransport":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
