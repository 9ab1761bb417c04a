#!/usr/bin/env python3
"""
Unified CLI for vehicle maintenance scheduling.

Commands:
  import-catalog - Load service definitions and schedule rules
  add-vehicle    - Register a vehicle and generate its schedule
  remove-vehicle - Delete a vehicle with its schedule and history
  vehicles       - List registered vehicles with due counts
  update-miles   - Log an odometer reading and re-evaluate
  mileage        - View the odometer log
  complete       - Log a completed service
  delete-service - Remove a service history entry
  status         - Show what maintenance is overdue, upcoming, or ok
  history        - View service history (--ids shows record ids)
  rules          - List schedule rules (or those matching a vehicle)
  sweep          - Re-evaluate every vehicle (daily job)
  reminders      - Set an owner's reminder lead window
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from tabulate import tabulate
from typing import Dict, List, Optional

from service_schedule import (
    MileageEntry,
    ReminderPreferences,
    ScheduleRepository,
    ServiceHistoryRecord,
    Settings,
    Status,
    Vehicle,
    VehicleScheduleEntry,
    YamlRepository,
    delete_service_record,
    generate_schedule_for_vehicle,
    history_newest_first,
    load_catalog,
    mileage_log,
    new_id,
    record_mileage,
    record_service_completion,
    sorted_entries,
    update_all_vehicle_statuses,
    update_vehicle_statuses,
)

# =============================================================================
# Formatting helpers
# =============================================================================


def format_miles(miles: Optional[float]) -> str:
    """Format mileage for display."""
    return f"{miles:,.0f}" if miles is not None else "-"


def format_cost(cost: Optional[float]) -> str:
    """Format cost for display."""
    return f"${cost:,.2f}" if cost is not None else "-"


def format_remaining(miles: Optional[float]) -> str:
    """Format remaining miles for display."""
    if miles is None:
        return "-"
    if miles < 0:
        return f"-{abs(miles):,.0f}"
    return f"{miles:,.0f}"


def format_time_remaining(days: Optional[int]) -> str:
    """Format remaining time for display (e.g., '3mo 15d' or '-2mo 5d')."""
    if days is None:
        return "-"

    sign = "-" if days < 0 else ""
    days = abs(days)
    months = days // 30
    if months > 0:
        return f"{sign}{months}mo {days % 30}d"
    return f"{sign}{days}d"


def truncate(text: Optional[str], max_len: int = 30) -> str:
    """Truncate text with ellipsis if too long."""
    if text is None:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def service_names(repo: ScheduleRepository) -> Dict[str, str]:
    """Map service definition ids to display names."""
    return {d.id: d.name for d in repo.list_service_definitions()}


# =============================================================================
# Tables
# =============================================================================


def make_status_table(
    entries: List[VehicleScheduleEntry],
    names: Dict[str, str],
    current_miles: int,
    today: date,
) -> List[List[str]]:
    """Convert schedule entries to table rows."""
    rows = []
    for entry in entries:
        rows.append(
            [
                names.get(entry.service_definition_id, entry.service_definition_id),
                entry.status.label.upper(),
                format_miles(entry.next_due_mileage),
                entry.next_due_date.isoformat() if entry.next_due_date else "-",
                format_remaining(entry.miles_remaining(current_miles)),
                format_time_remaining(entry.days_remaining(today)),
            ]
        )
    return rows


def make_history_table(
    records: List[ServiceHistoryRecord], names: Dict[str, str], show_id: bool = False
) -> List[List[str]]:
    """Convert history records to table rows."""
    rows = []
    for record in records:
        row = [
            record.completed_date.isoformat(),
            format_miles(record.mileage_at_service),
            names.get(record.service_definition_id, record.service_definition_id),
            record.shop_name or "-",
            format_cost(record.cost),
            truncate(record.notes),
        ]
        if show_id:
            row.insert(0, record.id)
        rows.append(row)
    return rows


def make_mileage_table(entries: List[MileageEntry]) -> List[List[str]]:
    """Convert odometer log entries to table rows."""
    return [
        [
            entry.recorded_at.isoformat(),
            format_miles(entry.mileage),
            truncate(entry.notes, 40),
        ]
        for entry in entries
    ]


# =============================================================================
# Commands
# =============================================================================


def _require_vehicle(repo: ScheduleRepository, vehicle_id: str) -> Optional[Vehicle]:
    vehicle = repo.find_vehicle(vehicle_id)
    if vehicle is None:
        print(f"Error: Unknown vehicle '{vehicle_id}'")
    return vehicle


def _resolve_service(repo: ScheduleRepository, key: str) -> Optional[str]:
    """Find a service definition id by id or name (case-insensitive)."""
    key = key.lower()
    for definition in repo.list_service_definitions():
        if definition.id.lower() == key or definition.name.lower() == key:
            return definition.id
    return None


def cmd_import_catalog(args, repo: ScheduleRepository, today: date):
    """Load service definitions and schedule rules from a catalog file."""
    try:
        definitions, rules = load_catalog(args.catalog)
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    print(f"Catalog: {args.catalog}")
    print(f"Service definitions: {len(definitions)}")
    print(f"Rules: {len(rules)}")

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    repo.load_catalog(definitions, rules)
    print("Catalog imported.")
    return 0


def cmd_add_vehicle(args, repo: ScheduleRepository, today: date):
    """Register a vehicle and generate its maintenance schedule."""
    if args.miles < 0:
        print("Error: --miles must be non-negative")
        return 1

    vehicle = Vehicle(
        id=args.id or new_id(),
        make=args.make,
        model=args.model,
        year=args.year,
        current_mileage=args.miles,
        engine=args.engine,
        drive_type=args.drive_type,
        owner_id=args.owner,
        vin=args.vin,
        trim=args.trim,
    )
    if repo.find_vehicle(vehicle.id) is not None:
        print(f"Error: Vehicle '{vehicle.id}' already exists")
        return 1

    repo.add_vehicle(vehicle)
    entries = generate_schedule_for_vehicle(repo, vehicle.id, today)

    print(f"Vehicle: {vehicle.name}")
    print(f"ID: {vehicle.id}")
    print(f"Current mileage: {vehicle.current_mileage:,}")
    print(f"Schedule entries: {len(entries)}")
    return 0


def cmd_remove_vehicle(args, repo: ScheduleRepository, today: date):
    """Delete a vehicle with its schedule and history."""
    vehicle = _require_vehicle(repo, args.vehicle)
    if vehicle is None:
        return 1
    repo.delete_vehicle(vehicle.id)
    print(f"Removed {vehicle.name} ({vehicle.id}).")
    return 0


def cmd_vehicles(args, repo: ScheduleRepository, today: date):
    """List registered vehicles with overdue/upcoming counts."""
    rows = []
    for vehicle_id in repo.list_vehicle_ids():
        vehicle = repo.find_vehicle(vehicle_id)
        entries = update_vehicle_statuses(repo, vehicle_id, today)
        rows.append(
            [
                vehicle.id,
                vehicle.name,
                format_miles(vehicle.current_mileage),
                sum(1 for e in entries if e.status == Status.OVERDUE),
                sum(1 for e in entries if e.status == Status.UPCOMING),
            ]
        )

    if not rows:
        print("No vehicles registered.")
        return 0

    headers = ["ID", "Vehicle", "Mileage", "Overdue", "Upcoming"]
    print(tabulate(rows, headers=headers, tablefmt="simple"))
    return 0


def cmd_update_miles(args, repo: ScheduleRepository, today: date):
    """Update current vehicle mileage and re-evaluate its schedule."""
    vehicle = _require_vehicle(repo, args.vehicle)
    if vehicle is None:
        return 1
    if args.mileage < 0:
        print("Error: mileage must be non-negative")
        return 1

    print(f"Vehicle: {vehicle.name}")
    print(f"Current mileage: {vehicle.current_mileage:,}")
    print(f"New mileage:     {args.mileage:,}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    entries = record_mileage(repo, vehicle.id, args.mileage, today, notes=args.notes)
    due = [e for e in entries if e.is_due]
    if args.mileage < vehicle.current_mileage:
        print("Reading is below the odometer; logged without changing it.")
    print(f"Mileage updated. {len(due)} service(s) upcoming or overdue.")
    return 0


def cmd_mileage(args, repo: ScheduleRepository, today: date):
    """View the odometer log."""
    vehicle = _require_vehicle(repo, args.vehicle)
    if vehicle is None:
        return 1

    entries = mileage_log(repo, vehicle.id)
    print(f"Vehicle: {vehicle.name}")
    print(f"Current mileage: {vehicle.current_mileage:,}")
    print(f"Readings: {len(entries)}")
    print()

    if not entries:
        print("No mileage entries found.")
        return 0

    headers = ["Date", "Mileage", "Notes"]
    print(tabulate(make_mileage_table(entries), headers=headers, tablefmt="simple"))
    return 0


def cmd_complete(args, repo: ScheduleRepository, today: date):
    """Log a completed service."""
    vehicle = _require_vehicle(repo, args.vehicle)
    if vehicle is None:
        return 1

    service_id = _resolve_service(repo, args.service)
    if service_id is None or repo.find_entry(vehicle.id, service_id) is None:
        print(f"Error: Unknown service '{args.service}' for {vehicle.name}")
        names = service_names(repo)
        print("\nScheduled services:")
        scheduled = sorted(
            repo.list_entries(vehicle.id),
            key=lambda e: names.get(e.service_definition_id, ""),
        )
        for entry in scheduled:
            name = names.get(entry.service_definition_id)
            print(f"  {name} ({entry.service_definition_id})")
        return 1

    try:
        completed = date.fromisoformat(args.date) if args.date else today
    except ValueError:
        print(f"Error: Invalid date '{args.date}' (expected YYYY-MM-DD)")
        return 1
    mileage = args.mileage if args.mileage is not None else vehicle.current_mileage

    print(f"Adding service entry for {vehicle.name}:")
    print(f"  Service: {service_names(repo)[service_id]}")
    print(f"  Date:    {completed.isoformat()}")
    print(f"  Mileage: {mileage:,}")
    if args.shop:
        print(f"  Shop:    {args.shop}")
    if args.notes:
        print(f"  Notes:   {args.notes}")
    if args.cost is not None:
        print(f"  Cost:    ${args.cost:.2f}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    record_service_completion(
        repo,
        vehicle.id,
        service_id,
        completed,
        mileage,
        cost=args.cost,
        notes=args.notes,
        shop_name=args.shop,
        today=today,
    )
    print("Entry saved.")
    return 0


def cmd_delete_service(args, repo: ScheduleRepository, today: date):
    """Remove a service history entry by id (see `history --ids`)."""
    vehicle = _require_vehicle(repo, args.vehicle)
    if vehicle is None:
        return 1

    try:
        record = delete_service_record(repo, vehicle.id, args.record_id)
    except LookupError as e:
        print(f"Error: {e}")
        return 1

    name = service_names(repo).get(
        record.service_definition_id, record.service_definition_id
    )
    print(
        f"Deleted {name} from {record.completed_date.isoformat()} "
        f"at {record.mileage_at_service:,} mi."
    )
    return 0


def cmd_status(args, repo: ScheduleRepository, today: date):
    """Show what maintenance is overdue, upcoming, or ok."""
    vehicle = _require_vehicle(repo, args.vehicle)
    if vehicle is None:
        return 1

    update_vehicle_statuses(repo, vehicle.id, today)
    prefs = repo.get_preferences(vehicle.owner_id)
    entries = sorted_entries(repo, vehicle.id)
    names = service_names(repo)

    print(f"Vehicle: {vehicle.name}")
    print(f"Current mileage: {vehicle.current_mileage:,} (as of {today.isoformat()})")
    print(f"Lead window: {prefs.lead_miles:,} mi / {prefs.lead_days} days")
    print(f"Schedule entries: {len(entries)}")
    print()

    headers = [
        "Service",
        "Status",
        "Due (mi)",
        "Due (date)",
        "Remaining (mi)",
        "Remaining (time)",
    ]
    for status in (Status.OVERDUE, Status.UPCOMING, Status.OK):
        if status == Status.OK and not args.all:
            continue
        group = [e for e in entries if e.status == status]
        if not group:
            continue
        print(f"{status.label.upper()}:")
        table = make_status_table(group, names, vehicle.current_mileage, today)
        print(tabulate(table, headers=headers, tablefmt="simple"))
        print()

    if not args.all:
        ok_count = sum(1 for e in entries if e.status == Status.OK)
        print(f"OK: {ok_count} (use --all to list)")
    return 0


def cmd_history(args, repo: ScheduleRepository, today: date):
    """View service history."""
    vehicle = _require_vehicle(repo, args.vehicle)
    if vehicle is None:
        return 1

    records = history_newest_first(repo, vehicle.id)
    if args.since:
        try:
            since = date.fromisoformat(args.since)
        except ValueError:
            print(f"Error: Invalid date '{args.since}' (expected YYYY-MM-DD)")
            return 1
        records = [r for r in records if r.completed_date >= since]

    total_cost = sum(r.cost for r in records if r.cost is not None)

    print(f"Vehicle: {vehicle.name}")
    print(f"Current mileage: {vehicle.current_mileage:,}")
    print(f"Services: {len(records)}")
    if total_cost > 0:
        print(f"Total cost: ${total_cost:,.2f}")
    print()

    if not records:
        print("No history entries found.")
        return 0

    headers = ["Date", "Mileage", "Service", "Shop", "Cost", "Notes"]
    if args.ids:
        headers.insert(0, "ID")
    print(
        tabulate(
            make_history_table(records, service_names(repo), show_id=args.ids),
            headers=headers,
            tablefmt="simple",
        )
    )
    return 0


def cmd_rules(args, repo: ScheduleRepository, today: date):
    """List schedule rules, or only those that win for a vehicle."""
    if args.vehicle:
        vehicle = _require_vehicle(repo, args.vehicle)
        if vehicle is None:
            return 1
        rules = repo.list_matching_rules(vehicle)
        print(f"Vehicle: {vehicle.name}")
    else:
        rules = sorted(
            repo.list_rules(), key=lambda r: (r.service_definition_id, -r.priority)
        )
    print(f"Rules: {len(rules)}")
    print()

    names = service_names(repo)
    rows = []
    for rule in rules:
        interval = []
        if rule.mileage_interval:
            interval.append(f"{rule.mileage_interval:,} mi")
        if rule.month_interval:
            interval.append(f"{rule.month_interval} mo")
        joiner = " / " if rule.is_combined else " + "
        rows.append(
            [
                names.get(rule.service_definition_id, rule.service_definition_id),
                rule.scope,
                joiner.join(interval) if interval else "-",
                rule.priority,
            ]
        )

    headers = ["Service", "Applies To", "Interval", "Priority"]
    print(tabulate(rows, headers=headers, tablefmt="simple"))
    return 0


def cmd_sweep(args, repo: ScheduleRepository, today: date):
    """Re-evaluate every vehicle."""
    count = update_all_vehicle_statuses(repo, today)
    print(f"Evaluated {count} vehicle(s) as of {today.isoformat()}.")
    return 0


def cmd_reminders(args, repo: ScheduleRepository, today: date):
    """Set an owner's reminder lead window."""
    current = repo.get_preferences(args.owner)
    prefs = ReminderPreferences(
        args.lead_miles if args.lead_miles is not None else current.lead_miles,
        args.lead_days if args.lead_days is not None else current.lead_days,
    )
    if prefs.lead_miles < 0 or prefs.lead_days < 0:
        print("Error: lead window must be non-negative")
        return 1

    repo.set_preferences(args.owner, prefs)
    print(f"Owner: {args.owner}")
    print(f"Lead window: {prefs.lead_miles:,} mi / {prefs.lead_days} days")
    return 0


# =============================================================================
# Main
# =============================================================================


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Vehicle maintenance scheduler",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s import-catalog catalog/default.yaml
  %(prog)s add-vehicle --make Toyota --model 4Runner --year 2021 \\
      --drive-type 4WD --miles 45000 --id 4runner
  %(prog)s update-miles 4runner 50200
  %(prog)s mileage 4runner
  %(prog)s complete 4runner "Oil Change" --mileage 50500 --shop Dealer
  %(prog)s status 4runner --all
  %(prog)s history 4runner --since 2024-01-01
  %(prog)s delete-service 4runner <record-id>
  %(prog)s rules 4runner
  %(prog)s sweep
""",
    )
    parser.add_argument(
        "--garage",
        type=Path,
        default=settings.garage_file,
        help=f"Path to garage YAML file (default: {settings.garage_file})",
    )
    parser.add_argument(
        "--date",
        dest="as_of",
        type=str,
        help="Evaluate as of this date, YYYY-MM-DD (default: today)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    catalog_parser = subparsers.add_parser(
        "import-catalog", help="Load service definitions and schedule rules"
    )
    catalog_parser.add_argument("catalog", type=Path, help="Catalog YAML file")
    catalog_parser.add_argument(
        "--dry-run", action="store_true", help="Show what would be imported"
    )

    add_parser = subparsers.add_parser(
        "add-vehicle", help="Register a vehicle and generate its schedule"
    )
    add_parser.add_argument("--make", required=True)
    add_parser.add_argument("--model", required=True)
    add_parser.add_argument("--year", type=int, required=True)
    add_parser.add_argument("--engine", type=str, help="e.g. '3.5L V6'")
    add_parser.add_argument("--drive-type", type=str, help="e.g. 4WD, AWD, FWD")
    add_parser.add_argument("--miles", type=int, default=0, help="Current mileage")
    add_parser.add_argument("--owner", type=str, help="Owner id for reminder settings")
    add_parser.add_argument("--vin", type=str)
    add_parser.add_argument("--trim", type=str)
    add_parser.add_argument("--id", type=str, help="Vehicle id (default: generated)")

    remove_parser = subparsers.add_parser(
        "remove-vehicle", help="Delete a vehicle with its schedule and history"
    )
    remove_parser.add_argument("vehicle", help="Vehicle id")

    subparsers.add_parser("vehicles", help="List registered vehicles")

    miles_parser = subparsers.add_parser("update-miles", help="Log an odometer reading")
    miles_parser.add_argument("vehicle", help="Vehicle id")
    miles_parser.add_argument("mileage", type=int, help="Current mileage")
    miles_parser.add_argument("--notes", type=str, help="Notes about the reading")
    miles_parser.add_argument(
        "--dry-run", action="store_true", help="Show what would be updated"
    )

    mileage_parser = subparsers.add_parser("mileage", help="View the odometer log")
    mileage_parser.add_argument("vehicle", help="Vehicle id")

    complete_parser = subparsers.add_parser("complete", help="Log a completed service")
    complete_parser.add_argument("vehicle", help="Vehicle id")
    complete_parser.add_argument(
        "service", help="Service id or name (e.g., 'oil-change' or 'Oil Change')"
    )
    complete_parser.add_argument(
        "--date", type=str, help="Service date in YYYY-MM-DD format (default: today)"
    )
    complete_parser.add_argument(
        "--mileage", type=int, help="Mileage at service (default: current mileage)"
    )
    complete_parser.add_argument("--shop", type=str, help="Who performed the service")
    complete_parser.add_argument("--notes", type=str, help="Notes about the service")
    complete_parser.add_argument("--cost", type=float, help="Cost of service")
    complete_parser.add_argument(
        "--dry-run", action="store_true", help="Show what would be added"
    )

    delete_parser = subparsers.add_parser(
        "delete-service", help="Remove a service history entry"
    )
    delete_parser.add_argument("vehicle", help="Vehicle id")
    delete_parser.add_argument("record_id", help="History record id")

    status_parser = subparsers.add_parser(
        "status", help="Show what maintenance is overdue, upcoming, or ok"
    )
    status_parser.add_argument("vehicle", help="Vehicle id")
    status_parser.add_argument(
        "--all", action="store_true", help="Also list services that are ok"
    )

    history_parser = subparsers.add_parser("history", help="View service history")
    history_parser.add_argument("vehicle", help="Vehicle id")
    history_parser.add_argument(
        "--since", type=str, help="Show only entries since date (YYYY-MM-DD)"
    )
    history_parser.add_argument(
        "--ids", action="store_true", help="Show record ids (for delete-service)"
    )

    rules_parser = subparsers.add_parser("rules", help="List schedule rules")
    rules_parser.add_argument(
        "vehicle", nargs="?", help="Only show the rules that win for this vehicle"
    )

    subparsers.add_parser("sweep", help="Re-evaluate every vehicle")

    reminders_parser = subparsers.add_parser(
        "reminders", help="Set an owner's reminder lead window"
    )
    reminders_parser.add_argument("owner", help="Owner id")
    reminders_parser.add_argument("--lead-miles", type=int)
    reminders_parser.add_argument("--lead-days", type=int)

    return parser


COMMANDS = {
    "import-catalog": cmd_import_catalog,
    "add-vehicle": cmd_add_vehicle,
    "remove-vehicle": cmd_remove_vehicle,
    "vehicles": cmd_vehicles,
    "update-miles": cmd_update_miles,
    "mileage": cmd_mileage,
    "complete": cmd_complete,
    "delete-service": cmd_delete_service,
    "status": cmd_status,
    "history": cmd_history,
    "rules": cmd_rules,
    "sweep": cmd_sweep,
    "reminders": cmd_reminders,
}


def main(argv=None):
    try:
        settings = Settings()
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    args = build_parser(settings).parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        today = date.fromisoformat(args.as_of) if args.as_of else date.today()
    except ValueError:
        print(f"Error: Invalid date '{args.as_of}' (expected YYYY-MM-DD)")
        return 1

    if args.command != "import-catalog" and not args.garage.exists():
        print(f"Error: File not found: {args.garage}")
        return 1

    repo = YamlRepository(args.garage, settings.default_preferences)
    return COMMANDS[args.command](args, repo, today)


if __name__ == "__main__":
    sys.exit(main() or 0)
