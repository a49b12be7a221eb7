"""API status endpoint."""

from fishfish.api.http_client import AsyncHttpClient
from fishfish.models.entities import ApiStatus


async def get_status(http: AsyncHttpClient) -> ApiStatus:
    """Get the status and metrics of the API."""
    response = await http.request("GET", "/status")

    return ApiStatus(
        domains=response["domains"],
        urls=response["urls"],
        requests=response["requests"],
        uptime=response["uptime"],
        worker=response["worker"],
    )
