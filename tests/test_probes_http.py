"""HTTP 探测测试，使用 httpx.MockTransport 或本地回环服务，不访问真实网络。"""
import asyncio
import time

import httpx
import pytest

from statuswatch.probes.http import TIMEOUT_ERROR, check_url, is_online_status


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestIsOnlineStatus:
    @pytest.mark.parametrize("code,expected", [
        (199, False), (200, True), (204, True), (302, True), (399, True), (400, False), (503, False),
    ])
    def test_boundaries(self, code, expected):
        assert is_online_status(code) is expected


class TestCheckUrl:
    async def test_ok(self):
        async with _client(lambda request: httpx.Response(200, text="ok")) as client:
            result = await check_url("http://svc.test/health", client=client)
        assert result.online is True
        assert result.status_code == 200
        assert result.error is None

    async def test_not_found_is_a_result_not_an_exception(self):
        async with _client(lambda request: httpx.Response(404)) as client:
            result = await check_url("http://svc.test/missing", client=client)
        assert result.online is False
        assert result.status_code == 404
        assert result.response_time_ms == 0
        assert "404" in result.error

    async def test_server_error(self):
        async with _client(lambda request: httpx.Response(503)) as client:
            result = await check_url("http://svc.test/", client=client)
        assert result.online is False
        assert result.status_code == 503

    async def test_redirects_are_followed(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/old":
                return httpx.Response(301, headers={"Location": "http://svc.test/new"})
            return httpx.Response(200)

        async with _client(handler) as client:
            result = await check_url("http://svc.test/old", client=client)
        assert result.online is True
        assert result.status_code == 200

    async def test_connection_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        async with _client(handler) as client:
            result = await check_url("http://svc.test/", client=client)
        assert result.online is False
        assert result.status_code == 0
        assert result.response_time_ms == 0
        assert "Connection refused" in result.error

    async def test_timeout_without_message(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("", request=request)

        async with _client(handler) as client:
            result = await check_url("http://svc.test/", client=client)
        assert result.online is False
        assert result.error == "Request timed out"

    async def test_unsupported_scheme(self):
        result = await check_url("ftp://svc.test/file")
        assert result.online is False
        assert result.status_code == 0
        assert result.error

    async def test_slow_body_is_cut_off_at_timeout(self, tcp_server):
        """服务器先回 200 再一字节一字节地慢慢发送正文，检查必须在超时处结束。"""
        stop = asyncio.Event()

        async def trickle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
            await reader.readuntil(b"\r\n\r\n")
            writer.write(b"HTTP/1.1 200 OK\r\nContent-Length: 100\r\n\r\n")
            for _ in range(100):
                if stop.is_set():
                    break
                writer.write(b"x")
                try:
                    await writer.drain()
                except ConnectionError:
                    break
                await asyncio.sleep(0.1)
            writer.close()

        port = await tcp_server(trickle)
        begin = time.monotonic()
        result = await check_url(f"http://127.0.0.1:{port}/", timeout=0.5)
        took = time.monotonic() - begin
        stop.set()

        assert took < 2.0
        assert result.online is False
        assert result.status_code == 0
        assert result.response_time_ms == 0
        assert result.error == TIMEOUT_ERROR
