"""Authenticated passthrough to the upstream API under /api."""

from fastapi import APIRouter, Request, Response

from clinicrelay.api.dependencies import SettingsDep, UpstreamClientDep
from clinicrelay.core.logging import get_logger, truncate_body


router = APIRouter(tags=["proxy"])
logger = get_logger(__name__)

# Headers managed by the relay's own server or not safe to copy back
EXCLUDED_RESPONSE_HEADERS = frozenset(
    {
        "set-cookie",
        "origin",
        "host",
        "connection",
        "transfer-encoding",
        "content-encoding",
        "content-length",
    }
)

BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


@router.api_route(
    "/api/{path:path}",
    methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"],
)
async def proxy(
    path: str,
    request: Request,
    upstream: UpstreamClientDep,
    settings: SettingsDep,
) -> Response:
    """Forward the request to the upstream API with the relay's bearer token.

    Credential and upstream failures are turned into JSON errors by the
    application's error handlers.
    """
    headers = {}
    if accept := request.headers.get("accept"):
        headers["Accept"] = accept
    if content_type := request.headers.get("content-type"):
        headers["Content-Type"] = content_type

    content = await request.body() if request.method in BODY_METHODS else None

    logger.info(
        "proxy_request",
        method=request.method,
        path=f"/{path}",
        query=str(request.url.query),
    )

    upstream_response = await upstream.send(
        request.method,
        f"/{path}",
        params=request.query_params.multi_items() or None,
        content=content,
        headers=headers,
        timeout=settings.proxy.timeout,
    )

    logger.info(
        "proxy_response",
        status_code=upstream_response.status_code,
        body=truncate_body(upstream_response.text),
    )

    response_headers = {
        name: value
        for name, value in upstream_response.headers.items()
        if name.lower() not in EXCLUDED_RESPONSE_HEADERS
    }
    return Response(
        content=upstream_response.content,
        status_code=upstream_response.status_code,
        headers=response_headers,
    )
