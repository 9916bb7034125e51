from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from weather_edge.services.request_router import RequestRouter

router = APIRouter(tags=["Weather"])


def get_request_router(request: Request) -> RequestRouter:
    """Return the router built by the app factory."""
    return request.app.state.request_router


@router.api_route(
    "/{full_path:path}",
    methods=["GET", "POST", "OPTIONS", "PUT", "PATCH", "DELETE", "HEAD"],
    include_in_schema=False,
)
async def weather(
    request: Request,
    request_router: RequestRouter = Depends(get_request_router),
) -> Response:
    """Weather endpoint.

    Every path and method is routed here so the request router decides
    between 404, 405 and the weather lookup, in that order.
    Query parameter ``city`` selects the city.
    """
    return await request_router.handle(request)
