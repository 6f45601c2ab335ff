"""Tests for the token validation probe."""

from collections.abc import AsyncGenerator

import httpx
import pytest
import pytest_asyncio
from pytest_httpx import HTTPXMock

from clinicrelay.auth.exceptions import UpstreamUnreachableError
from clinicrelay.auth.validator import TokenValidator
from clinicrelay.config.upstream import UpstreamSettings


VALIDATION_URL = "https://clinic.test/api/v1/practice"


@pytest_asyncio.fixture
async def validator() -> AsyncGenerator[TokenValidator, None]:
    async with httpx.AsyncClient() as client:
        yield TokenValidator(client, UpstreamSettings(base_url="https://clinic.test"))


@pytest.mark.asyncio
async def test_status_200_is_valid(
    validator: TokenValidator, httpx_mock: HTTPXMock
) -> None:
    httpx_mock.add_response(url=VALIDATION_URL, method="GET", json={"id": 1})

    assert await validator.validate("candidate") is True

    request = httpx_mock.get_request()
    assert request.headers["Authorization"] == "Bearer candidate"


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [401, 403, 404, 500])
async def test_other_status_is_invalid(
    validator: TokenValidator, httpx_mock: HTTPXMock, status_code: int
) -> None:
    httpx_mock.add_response(url=VALIDATION_URL, status_code=status_code)

    assert await validator.validate("candidate") is False


@pytest.mark.asyncio
async def test_network_failure_raises(
    validator: TokenValidator, httpx_mock: HTTPXMock
) -> None:
    httpx_mock.add_exception(httpx.ConnectTimeout("timeout"), url=VALIDATION_URL)

    with pytest.raises(UpstreamUnreachableError):
        await validator.validate("candidate")
