"""
aiohttp application serving the probe history.

Routes:
    GET /        HTML page listing the most recent results.
    GET /status  JSON array of the most recent results.
    GET /daily   JSON array of per-day statistics.

A failed store query is logged and answered with 500; the server keeps
serving later requests.
"""

import asyncio
import logging

from aiohttp import web

from netmon.errors import QueryFailure
from netmon.web.history_service import HistoryService

# Module logger
logger = logging.getLogger(__name__)

HISTORY_SERVICE = web.AppKey("history_service", HistoryService)


async def handle_summary(request: web.Request) -> web.Response:
    service = request.app[HISTORY_SERVICE]
    try:
        page = await service.get_summary()
    except QueryFailure:
        logger.exception("Could not render the summary page")
        return web.Response(status=500, text="could not read recent results")
    return web.Response(text=page, content_type="text/html")


async def handle_status(request: web.Request) -> web.Response:
    service = request.app[HISTORY_SERVICE]
    try:
        payload = await service.get_status()
    except QueryFailure:
        logger.exception("Could not read recent results for /status")
        return web.json_response({"error": "could not read recent results"}, status=500)
    return web.json_response(payload)


async def handle_daily(request: web.Request) -> web.Response:
    service = request.app[HISTORY_SERVICE]
    try:
        payload = await service.get_daily()
    except QueryFailure:
        logger.exception("Could not read the daily summary for /daily")
        return web.json_response({"error": "could not read daily summary"}, status=500)
    return web.json_response(payload)


def create_app(service: HistoryService) -> web.Application:
    """
    Initialize the web application.

    Args:
        service: The history views the handlers delegate to.

    Returns:
        Configured aiohttp web Application
    """
    app = web.Application()
    app[HISTORY_SERVICE] = service
    app.add_routes(
        [
            web.get("/", handle_summary),
            web.get("/status", handle_status),
            web.get("/daily", handle_daily),
        ]
    )
    return app


async def serve(service: HistoryService, host: str, port: int) -> None:
    """
    Runs the history application until the surrounding task is cancelled.

    Args:
        service: The history views to expose.
        host: Interface to bind.
        port: TCP port to listen on.
    """
    runner = web.AppRunner(create_app(service))
    await runner.setup()
    try:
        site = web.TCPSite(runner, host, port)
        await site.start()
        logger.info(f"History service listening on http://{host}:{port}/")
        print(f"Serving history on http://{host}:{port}/", flush=True)
        # Block until cancelled (Ctrl+C or shutdown)
        await asyncio.Event().wait()
    finally:
        logger.info("Stopping history service...")
        await runner.cleanup()
