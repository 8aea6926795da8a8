"""
RPC request pipelines

A pipeline runs one call as two round-trips: the dialect's handshake, then
the RPC request carrying the credential the handshake produced. The
blocking pipeline drives them with requests, the non-blocking one with
aiohttp. Both open a fresh HTTP session per call and close it when the call
ends, so no cookie, token or connection outlives the call.
"""

import asyncio
import itertools
import json
import threading
from dataclasses import dataclass, field

import aiohttp
import requests

from torrentrpc.exceptions import ClientError
from torrentrpc.utils.helpers import basic_auth_header
from torrentrpc.utils.logger import get_logger


@dataclass
class HttpRequest:
    """An HTTP request as a dialect describes it"""

    method: str
    url: str
    headers: dict = field(default_factory=dict)
    body: str = None
    auth: tuple = None

    @property
    def data(self):
        return self.body.encode('utf-8') if self.body is not None else None


@dataclass
class HttpResponse:
    """The parts of an HTTP response a pipeline inspects"""

    status: int
    reason: str
    headers: object
    body: str


class RequestIdGenerator:
    """Monotonic request ids, safe to share between threads"""

    def __init__(self, start=1):
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next_id(self):
        with self._lock:
            return next(self._counter)


def validate_response(method, response):
    """
    Check an RPC response and return its body

    Args:
        method: RPC method that was called
        response: HttpResponse

    Returns:
        str: The JSON body

    Raises:
        ClientError: Status is not 200 or the body is not JSON
    """
    if response.status != 200:
        raise ClientError(
            f'"{method}" expected 200 response, got "{response.status}" instead, '
            f'reason: "{response.reason}"'
        )

    try:
        json.loads(response.body)
    except ValueError:
        raise ClientError(
            f'"{method}" did not get back a JSON response body, got "{response.body}" instead'
        )

    return response.body


def _decode(content):
    return content.decode('utf-8', errors='replace')


class BasePipeline:
    """What the blocking and non-blocking pipelines share"""

    def __init__(self, dialect, config, logger=None):
        self.dialect = dialect
        self.config = config
        self.logger = logger or get_logger(dialect.name)
        self.request_ids = RequestIdGenerator()

    def _handshake_request(self):
        request = self.dialect.handshake_request(self.config, self.request_ids.next_id())
        self.logger.debug(f"Authenticating with {self.dialect.name} at {request.url}")
        return request

    def _rpc_request(self, method, params, handshake_response):
        credentials = self.dialect.session_headers(handshake_response)
        self.logger.debug(f"Calling {method} on {self.dialect.name}")
        return self.dialect.rpc_request(
            self.config, method, params, credentials, self.request_ids.next_id()
        )


class RpcPipeline(BasePipeline):
    """Blocking pipeline, each call ties up the calling thread for both round-trips"""

    def __init__(self, dialect, config, logger=None, session_factory=None):
        super().__init__(dialect, config, logger)
        self.session_factory = session_factory or requests.Session

    def call(self, method, params):
        """
        Authenticate, then make one RPC call

        Args:
            method: RPC method name
            params: Dialect specific parameters

        Returns:
            str: The raw JSON response body
        """
        try:
            with self.session_factory() as session:
                handshake = self._send(session, self._handshake_request())
                response = self._send(session, self._rpc_request(method, params, handshake))
                return validate_response(method, response)
        except ClientError as e:
            self.logger.error(f"{self.dialect.name} RPC call {method} failed: {str(e)}")
            raise

    def _send(self, session, request):
        try:
            response = session.request(
                request.method,
                request.url,
                headers=request.headers,
                data=request.data,
                auth=request.auth,
                timeout=self.config.timeout
            )
        except requests.exceptions.RequestException as e:
            raise ClientError(f"Something went wrong... {str(e)}") from e

        return HttpResponse(
            status=response.status_code,
            reason=response.reason,
            headers=response.headers,
            body=_decode(response.content)
        )


class AsyncRpcPipeline(BasePipeline):
    """Non-blocking pipeline, the two round-trips are the only suspension points"""

    def __init__(self, dialect, config, logger=None, session_factory=None):
        super().__init__(dialect, config, logger)
        self.session_factory = session_factory or aiohttp.ClientSession

    async def call(self, method, params):
        """
        Authenticate, then make one RPC call

        Args:
            method: RPC method name
            params: Dialect specific parameters

        Returns:
            str: The raw JSON response body
        """
        try:
            async with self.session_factory() as session:
                handshake = await self._send(session, self._handshake_request())
                response = await self._send(session, self._rpc_request(method, params, handshake))
                return validate_response(method, response)
        except ClientError as e:
            self.logger.error(f"{self.dialect.name} RPC call {method} failed: {str(e)}")
            raise

    async def _send(self, session, request):
        headers = dict(request.headers)
        if request.auth:
            headers['Authorization'] = basic_auth_header(*request.auth)

        try:
            async with session.request(
                request.method,
                request.url,
                headers=headers,
                data=request.data,
                timeout=aiohttp.ClientTimeout(total=self.config.timeout)
            ) as response:
                content = await response.read()
                return HttpResponse(
                    status=response.status,
                    reason=response.reason,
                    headers=response.headers,
                    body=_decode(content)
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ClientError(f"Something went wrong... {str(e)}") from e
