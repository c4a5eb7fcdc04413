"""Command line entry point for Trail Whisper.

Usage examples:

    # Parse FIT files and print what would be uploaded
    trail-whisper decode morning_run.fit ride.fit

    # Upload parsed activities to the configured store
    trail-whisper upload ~/Downloads/*.fit

    # Have I been here before? (uses the manual location when no --lat/--lon)
    trail-whisper visits --lat 51.4816 --lon -3.1791 --radius 400

    # Export a track as GeoJSON (a FIT file or a stored activity id)
    trail-whisper export morning_run.fit -o morning_run.geojson
"""

from __future__ import annotations

import argparse
from datetime import datetime
import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .activity_types import normalize_sport
from .config import (
    HISTORY_NEARBY_RADIUS_M,
    MANUAL_LOCATION_FILE,
    SUPABASE_USER_ID,
    VISITS_DEFAULT_RADIUS_M,
)
from .errors import ActivityStoreError, DecodeFailure
from .export import activity_to_feature, default_feature_filename, write_feature
from .fit_decoder import decode_fit_file
from .location import ManualLocationStore, resolve_position
from .models import Coordinate, SportType
from .services import ActivityHistory, UploadQueue, UploadStatus, VisitService
from .store import ActivityFilters, ActivityStore, NearFilter, SupabaseActivityStore
from .utils import format_datetime, format_distance_meters, parse_iso_datetime

LOGGER = logging.getLogger(__name__)

StoreFactory = Callable[[], ActivityStore]


def _setup_logging(verbose: bool = False) -> None:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )
    # fitdecode reports lenient-parsing problems (bad CRCs, unknown fields)
    # with warnings.warn.
    logging.captureWarnings(True)


def _default_store() -> ActivityStore:
    return SupabaseActivityStore()


def _parse_date(value: str) -> datetime:
    parsed = parse_iso_datetime(value)
    if parsed is None:
        raise argparse.ArgumentTypeError(f"invalid ISO date: {value!r}")
    return parsed


def _parse_sport(value: str) -> SportType:
    sport = normalize_sport(value)
    if sport == SportType.OTHER and value.strip().lower() != SportType.OTHER.value:
        raise argparse.ArgumentTypeError(f"unknown sport: {value!r}")
    return sport


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trail-whisper",
        description="Store FIT workouts and find out whether you've been here before.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    decode = sub.add_parser("decode", help="Parse FIT files and print a summary")
    decode.add_argument("files", nargs="+", type=Path)

    upload = sub.add_parser("upload", help="Parse FIT files and store them")
    upload.add_argument("files", nargs="+", type=Path)
    upload.add_argument("--user-id", default=SUPABASE_USER_ID)

    history = sub.add_parser("history", help="List stored activities")
    history.add_argument("--sport", type=_parse_sport)
    history.add_argument("--from", dest="started_from", type=_parse_date)
    history.add_argument("--to", dest="started_to", type=_parse_date)
    history.add_argument("--limit", type=int)
    history.add_argument(
        "--nearby",
        action="store_true",
        help="Only activities passing near the current location",
    )
    history.add_argument("--lat", type=float)
    history.add_argument("--lon", type=float)
    history.add_argument("--radius", type=float, default=HISTORY_NEARBY_RADIUS_M)

    visits = sub.add_parser("visits", help="Summarise visits near a location")
    visits.add_argument("--lat", type=float)
    visits.add_argument("--lon", type=float)
    visits.add_argument("--radius", type=float, default=VISITS_DEFAULT_RADIUS_M)

    export = sub.add_parser("export", help="Export a track as a GeoJSON Feature")
    export.add_argument("source", help="FIT file path or stored activity id")
    export.add_argument("-o", "--output", type=Path)

    location = sub.add_parser("location", help="Manage the manual location override")
    location.add_argument("--file", type=Path, default=Path(MANUAL_LOCATION_FILE))
    location_sub = location.add_subparsers(dest="location_command", required=True)
    location_set = location_sub.add_parser("set")
    location_set.add_argument("lat", type=float)
    location_set.add_argument("lon", type=float)
    location_sub.add_parser("show")
    location_sub.add_parser("clear")
    return parser


def _resolve_target(
    lat: Optional[float], lon: Optional[float]
) -> Optional[Coordinate]:
    if lat is not None and lon is not None:
        return Coordinate.checked(lat, lon)
    manual = ManualLocationStore().load()
    fix = resolve_position(None, manual)
    return fix.coordinate if fix is not None else None


def _cmd_decode(args: argparse.Namespace) -> int:
    queue = UploadQueue()
    items = queue.add_paths(args.files)
    for item in items:
        if item.parsed is None:
            print(f"{item.file_name}: ERROR {item.error}")
            continue
        parsed = item.parsed
        print(
            f"{item.file_name}: {parsed.sport} "
            f"{format_datetime(parsed.started_at)} -> {format_datetime(parsed.ended_at)} "
            f"{format_distance_meters(parsed.total_distance_m)} "
            f"{len(parsed.points)} points "
            f"start=({parsed.points[0].lat:.4f}, {parsed.points[0].lon:.4f})"
        )
    return 1 if any(item.status == UploadStatus.ERROR for item in items) else 0


def _cmd_upload(args: argparse.Namespace, store_factory: StoreFactory) -> int:
    queue = UploadQueue()
    queue.add_paths(args.files)
    attempted = queue.upload_all(store_factory(), args.user_id)
    for item in queue.items:
        suffix = f" ({item.error})" if item.error else ""
        print(f"{item.file_name}: {item.status.value}{suffix}")
    done = sum(1 for item in attempted if item.status == UploadStatus.DONE)
    LOGGER.info("Uploaded %d of %d files", done, len(queue.items))
    return 1 if any(item.status == UploadStatus.ERROR for item in queue.items) else 0


def _cmd_history(args: argparse.Namespace, store_factory: StoreFactory) -> int:
    near = None
    if args.nearby:
        target = _resolve_target(args.lat, args.lon)
        if target is None:
            LOGGER.error("No location available; pass --lat/--lon or set one")
            return 2
        near = NearFilter(lat=target.lat, lon=target.lon, radius_m=args.radius)
    filters = ActivityFilters(
        sport=args.sport,
        started_from=args.started_from,
        started_to=args.started_to,
        limit=args.limit,
        near=near,
    )
    activities = ActivityHistory(store_factory()).list_activities(filters)
    for activity in activities:
        print(
            f"{activity.id}  {activity.sport:<8}  {format_datetime(activity.started_at)}  "
            f"{format_distance_meters(activity.total_distance_m)}"
        )
    if not activities:
        print("No activities found.")
    return 0


def _cmd_visits(args: argparse.Namespace, store_factory: StoreFactory) -> int:
    target = _resolve_target(args.lat, args.lon)
    if target is None:
        LOGGER.error("No location available; pass --lat/--lon or set one")
        return 2
    result = VisitService(store_factory()).visits_near(target, args.radius)
    stats = result.stats
    if not stats.total_visits:
        print(f"No visits within {format_distance_meters(args.radius)} yet.")
        return 0
    print(
        f"{stats.total_visits} visits within {format_distance_meters(args.radius)}, "
        f"{format_distance_meters(stats.total_distance_m)} in total"
    )
    for entry in stats.by_sport:
        print(f"  {entry.sport}: {entry.count}")
    print("Most recent:")
    for visit in stats.recent_visits:
        print(
            f"  {format_datetime(visit.started_at)}  {visit.sport:<8}  "
            f"{format_distance_meters(visit.distance_m)} away"
        )
    return 0


def _cmd_export(args: argparse.Namespace, store_factory: StoreFactory) -> int:
    source = Path(args.source)
    if source.is_file():
        activity_id = source.stem
        feature = activity_to_feature(activity_id, decode_fit_file(source))
    else:
        activity_id = args.source
        feature = ActivityHistory(store_factory()).export_feature(activity_id)
        if feature is None:
            LOGGER.error("Activity %s not found", activity_id)
            return 1
    output = args.output or Path(default_feature_filename(activity_id))
    write_feature(feature, output)
    print(output)
    return 0


def _cmd_location(args: argparse.Namespace) -> int:
    store = ManualLocationStore(args.file)
    if args.location_command == "set":
        store.save(Coordinate.checked(args.lat, args.lon))
        print(f"Manual location set to {args.lat:.5f}, {args.lon:.5f}")
    elif args.location_command == "clear":
        store.clear()
        print("Manual location cleared")
    else:
        current = store.load()
        print(f"{current.lat:.5f}, {current.lon:.5f}" if current else "No manual location set")
    return 0


def main(
    argv: Sequence[str] | None = None,
    *,
    store_factory: StoreFactory = _default_store,
) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    handlers: dict[str, Callable[[], int]] = {
        "decode": lambda: _cmd_decode(args),
        "upload": lambda: _cmd_upload(args, store_factory),
        "history": lambda: _cmd_history(args, store_factory),
        "visits": lambda: _cmd_visits(args, store_factory),
        "export": lambda: _cmd_export(args, store_factory),
        "location": lambda: _cmd_location(args),
    }
    try:
        return handlers[args.command]()
    except (ActivityStoreError, DecodeFailure, ValueError) as exc:
        LOGGER.error("%s failed: %s", args.command, exc)
        return 2
    except FileNotFoundError as exc:
        LOGGER.error("File not found: %s", exc.filename)
        return 2


__all__: List[str] = ["main"]
