"""Command-line interface for the bike weather planner."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from pydantic import ValidationError

from bike_weather.config import get_settings
from bike_weather.models.location import Coordinates
from bike_weather.models.recommendation import RouteWeatherReport
from bike_weather.models.weather import WeatherSample
from bike_weather.providers.base import ProviderError
from bike_weather.recommendations.planner import RouteWeatherRequest
from bike_weather.services import build_services


def coordinates(value: str) -> Coordinates:
    """argparse type for "lat,lng" arguments."""
    try:
        return Coordinates.from_string(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def format_sample(sample: WeatherSample) -> str:
    wind = f"{sample.wind_speed_kph:.0f} km/h {sample.wind_direction}"
    if sample.wind_gust_kph is not None:
        wind += f" (gusts {sample.wind_gust_kph:.0f})"
    return (
        f"{sample.time:%a %H:%M}  {sample.temperature_c:5.1f}°C  {wind:<24}"
        f"  {sample.precipitation_mm:4.1f} mm  {sample.rain_chance_percent:3.0f}%  "
        f"{sample.condition}"
    )


def print_report(report: RouteWeatherReport) -> None:
    route = report.route
    print(
        f"Route: {route.distance_km} km via {route.routing_service}, "
        f"{route.point_count} points, {route.estimated_travel_time_minutes} min ride"
    )
    print()
    for i, option in enumerate(report.departure_options):
        marker = "*" if i == report.recommendation.best_index else " "
        rating = option.overall_rating
        print(
            f"{marker} {option.departure_time:%H:%M} -> {option.arrival_time:%H:%M}  "
            f"{rating.score:4.1f}/10  {rating.summary}"
        )
        for alert in rating.alerts:
            print(f"      ! {alert}")
    print()
    rec = report.recommendation
    print(f"{rec.label}: {rec.recommendation}")
    print(f"  {rec.reasoning}")


async def run_forecast(args: argparse.Namespace) -> int:
    async with build_services(get_settings()) as services:
        result = await services.registry.get_hourly_forecast(
            args.location.lat, args.location.lng, hours=args.hours, preferred=args.provider
        )
    for error in result.errors:
        print(f"warning: {error}", file=sys.stderr)
    print(f"Forecast for {args.location} from {result.provider_id}")
    for sample in result.data:
        print(format_sample(sample))
    return 0


async def run_route(args: argparse.Namespace) -> int:
    settings = get_settings()
    intervals = args.intervals
    if intervals is None:
        intervals = settings.default_departure_intervals
    travel_time = args.travel_time
    if travel_time is None:
        travel_time = settings.default_travel_time_minutes

    request = RouteWeatherRequest(
        start=args.start,
        end=args.end,
        departure_intervals=intervals,
        estimated_travel_time_minutes=travel_time,
        preferred_provider=args.provider,
        preferred_departure_time=args.prefer,
        timezone=args.timezone,
    )
    async with build_services(settings) as services:
        report = await services.planner.plan(request)
    print_report(report)
    return 0


def run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "bike_weather.api:create_app",
        factory=True,
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Bike Weather Planner - Pick the best time to ride"
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Forecast command
    forecast_parser = subparsers.add_parser(
        "forecast", help="Get the hourly forecast for a location"
    )
    forecast_parser.add_argument(
        "location", type=coordinates, help="Location as lat,lng coordinates"
    )
    forecast_parser.add_argument(
        "--provider",
        choices=["weatherapi", "openweathermap", "tomorrow"],
        help="Weather provider to try first",
    )
    forecast_parser.add_argument("--hours", type=int, default=12, help="Hours to show")

    # Route command
    route_parser = subparsers.add_parser(
        "route", help="Recommend a departure time for a ride"
    )
    route_parser.add_argument("start", type=coordinates, help="Start as lat,lng")
    route_parser.add_argument("end", type=coordinates, help="End as lat,lng")
    route_parser.add_argument("--intervals", type=int, help="Departure times to evaluate")
    route_parser.add_argument(
        "--travel-time", type=int, help="Expected ride duration in minutes"
    )
    route_parser.add_argument(
        "--provider",
        choices=["weatherapi", "openweathermap", "tomorrow"],
        help="Weather provider to try first",
    )
    route_parser.add_argument("--prefer", metavar="HH:MM", help="Preferred departure time")
    route_parser.add_argument("--timezone", help="IANA timezone for --prefer")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", help="Bind address")
    serve_parser.add_argument("--port", type=int, help="Port")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        return run_serve(args)

    runner = run_forecast if args.command == "forecast" else run_route
    try:
        return asyncio.run(runner(args))
    except ValidationError as e:
        parser.error(str(e))
    except ProviderError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
