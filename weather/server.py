# weather/server.py
# MCP server exposing NOAA/NWS weather lookups and the local app list.
# Tools:
#   - get-alerts(state: str)
#   - get-forecast(latitude: float, longitude: float)   continental US only
#   - get-installed-apps()
#
# Run:
#   weather-server            (or: python -m weather)
#   python weather/server.py  works only once the package is installed (pip install -e .)
# It speaks MCP over stdio; logs go to stderr, level from LOG_LEVEL.

import functools
import json
import logging
import os
import sys
from datetime import datetime
from typing import Annotated, Any, Awaitable, Callable, Dict, List

from anyio import to_thread
from mcp.server.fastmcp import FastMCP
from pydantic import Field

from weather.apps import list_installed_apps
from weather.nws import NWS_API_BASE, make_nws_request

logger = logging.getLogger(__name__)

mcp = FastMCP("weather")

# continental US bounding box
MIN_LATITUDE, MAX_LATITUDE = 24.396308, 49.384358
MIN_LONGITUDE, MAX_LONGITUDE = -124.848974, -66.885444

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def with_error_handling(tool_name: str):
    """Turn any exception raised by a tool into a normal text result."""
    def decorator(fn: Callable[..., Awaitable[str]]):
        @functools.wraps(fn)
        async def wrapper(*args, **kwargs) -> str:
            logger.debug("Running tool %s with %s %s", tool_name, args, kwargs)
            try:
                result = await fn(*args, **kwargs)
            except Exception as e:
                logger.exception("Tool %s failed", tool_name)
                return f"Error executing tool {tool_name}: {e}"
            logger.debug("Tool %s succeeded", tool_name)
            return result
        return wrapper
    return decorator


def _format_sent(sent: Any) -> str:
    if not sent:
        return "Unknown"
    try:
        return datetime.fromisoformat(str(sent)).strftime("%Y-%m-%d %H:%M:%S %Z").strip()
    except ValueError:
        return str(sent)


def format_alert(feature: Dict[str, Any]) -> str:
    props = feature.get("properties", {})
    return "\n".join([
        f"Sent: {_format_sent(props.get('sent'))}",
        f"Event: {props.get('event') or 'Unknown'}",
        f"Area: {props.get('areaDesc') or 'Unknown'}",
        f"Severity: {props.get('severity') or 'Unknown'}",
        f"Status: {props.get('status') or 'Unknown'}",
        f"Headline: {props.get('headline') or 'No headline'}",
        "---",
    ])


def format_period(period: Dict[str, Any]) -> str:
    temp = period.get("temperature")
    return "\n".join([
        f"{period.get('name') or 'Unknown'}:",
        f"Temperature: {temp if temp is not None else 'Unknown'}°{period.get('temperatureUnit') or 'F'}",
        f"Wind: {period.get('windSpeed') or 'Unknown'} {period.get('windDirection') or ''}".rstrip(),
        f"{period.get('shortForecast') or 'No forecast available'}",
        "---",
    ])


@mcp.tool(name="get-alerts", description="Get weather alerts for a state")
@with_error_handling("get-alerts")
async def get_alerts(
    state: Annotated[str, Field(min_length=2, max_length=2, description="Two-letter state code (e.g. CA, NY)")],
) -> str:
    state_code = state.upper()
    logger.info("Fetching weather alerts for %s", state_code)

    data = await make_nws_request(f"{NWS_API_BASE}/alerts/active?area={state_code}")
    if not data:
        logger.warning("No alert data for %s", state_code)
        return "Failed to retrieve alerts data"

    features: List[Dict[str, Any]] = data.get("features") or []
    if not features:
        logger.info("No active alerts for %s", state_code)
        return f"No active alerts for {state_code}"

    logger.info("Found %d active alerts for %s", len(features), state_code)
    alerts = "\n".join(format_alert(f) for f in features)
    return f"Active alerts for {state_code}:\n\n{alerts}"


@mcp.tool(name="get-forecast", description="Get the weather forecast for a location in the continental US")
@with_error_handling("get-forecast")
async def get_forecast(
    latitude: Annotated[float, Field(
        ge=MIN_LATITUDE, le=MAX_LATITUDE, description="Latitude of the location (continental US only)")],
    longitude: Annotated[float, Field(
        ge=MIN_LONGITUDE, le=MAX_LONGITUDE, description="Longitude of the location (continental US only)")],
) -> str:
    logger.info("Fetching forecast for (%s, %s)", latitude, longitude)

    # Step 1: resolve gridpoint from lat/lon
    points = await make_nws_request(f"{NWS_API_BASE}/points/{latitude:.4f},{longitude:.4f}")
    if not points:
        logger.warning("No gridpoint data for (%s, %s)", latitude, longitude)
        return (
            f"Failed to retrieve grid point data for coordinates ({latitude}, {longitude}). "
            "This location may not be supported by the NWS API (only US locations are supported)."
        )

    forecast_url = (points.get("properties") or {}).get("forecast")
    if not forecast_url:
        logger.warning("Gridpoint data has no forecast URL for (%s, %s)", latitude, longitude)
        return "Failed to get forecast URL from grid point data"

    # Step 2: fetch forecast periods
    forecast = await make_nws_request(forecast_url)
    if not forecast:
        logger.warning("No forecast data from %s", forecast_url)
        return "Failed to retrieve forecast data"

    periods: List[Dict[str, Any]] = (forecast.get("properties") or {}).get("periods") or []
    if not periods:
        logger.warning("No forecast periods for (%s, %s)", latitude, longitude)
        return "No forecast periods available"

    logger.debug("Found %d forecast periods", len(periods))
    body = "\n".join(format_period(p) for p in periods)
    return f"Forecast for ({latitude}, {longitude}):\n\n{body}"


@mcp.tool(name="get-installed-apps", description="Get my computer's installed apps")
@with_error_handling("get-installed-apps")
async def get_installed_apps() -> str:
    # walks the filesystem or registry
    apps = await to_thread.run_sync(list_installed_apps)
    logger.info("Found %d installed apps", len(apps))
    return json.dumps(apps, indent=2, ensure_ascii=False)


def log_level(name: str) -> int:
    """Map LOG_LEVEL (debug, info, warn, error) to a logging level; anything else is INFO."""
    return LOG_LEVELS.get(name.strip().lower(), logging.INFO)


def setup_logging() -> None:
    # stdout carries the MCP protocol; replaces the handler FastMCP installs
    logging.basicConfig(
        level=log_level(os.environ.get("LOG_LEVEL", "info")),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
        force=True,
    )


def main() -> None:
    setup_logging()
    logger.info("Weather MCP server running on stdio")
    try:
        mcp.run(transport="stdio")
    except KeyboardInterrupt:
        pass
    except Exception:
        logger.exception("Server failed")
        sys.exit(1)


if __name__ == "__main__":
    main()
