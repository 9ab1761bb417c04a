#!/usr/bin/env python3
"""Validate garage and catalog YAML files against the schema."""
import sys
from pathlib import Path

import yaml
from jsonschema import validate, ValidationError


def load_schema() -> dict:
    """Load the JSON schema from schema.yaml."""
    schema_path = Path(__file__).parent / "schema.yaml"
    with open(schema_path) as f:
        return yaml.safe_load(f)


def check_references(data: dict) -> list[str]:
    """Report references to undefined service definitions or vehicles."""
    known = {d["id"] for d in data.get("serviceDefinitions") or []}
    errors = []
    for rule in data.get("rules") or []:
        if rule["serviceDefinitionId"] not in known:
            errors.append(
                f"Rule '{rule['id']}' references unknown service definition "
                f"'{rule['serviceDefinitionId']}'"
            )
    vehicles = {v["id"] for v in data.get("vehicles") or []}
    pairs = set()
    for entry in data.get("schedules") or []:
        if entry["vehicleId"] not in vehicles:
            errors.append(
                f"Schedule '{entry['id']}' references unknown vehicle "
                f"'{entry['vehicleId']}'"
            )
        pair = (entry["vehicleId"], entry["serviceDefinitionId"])
        if pair in pairs:
            errors.append(
                f"Duplicate schedule for vehicle '{pair[0]}' and service '{pair[1]}'"
            )
        pairs.add(pair)
    for entry in data.get("mileage") or []:
        if entry["vehicleId"] not in vehicles:
            errors.append(
                f"Mileage entry '{entry['id']}' references unknown vehicle "
                f"'{entry['vehicleId']}'"
            )
    return errors


def validate_garage_file(filepath: Path, schema: dict) -> list[str]:
    """Validate a single garage or catalog YAML file. Returns list of errors."""
    errors = []
    try:
        with open(filepath) as f:
            data = yaml.safe_load(f)
        validate(instance=data, schema=schema)
        errors.extend(check_references(data))
    except yaml.YAMLError as e:
        errors.append(f"YAML parse error: {e}")
    except ValidationError as e:
        errors.append(f"Schema validation error: {e.message}")
        if e.path:
            errors.append(f"  at path: {'.'.join(str(p) for p in e.path)}")
    except Exception as e:
        errors.append(f"Error: {e}")
    return errors


def main(argv=None):
    """Validate the given files, or every catalog in catalog/ by default."""
    schema = load_schema()
    paths = [Path(p) for p in (argv if argv is not None else sys.argv[1:])]

    if not paths:
        catalog_dir = Path(__file__).parent / "catalog"
        if not catalog_dir.exists():
            print(f"Error: catalog directory not found: {catalog_dir}")
            return 1
        paths = sorted(
            list(catalog_dir.glob("*.yaml")) + list(catalog_dir.glob("*.yml"))
        )

    if not paths:
        print("Warning: No YAML files to validate")
        return 0

    all_valid = True
    for filepath in paths:
        errors = validate_garage_file(filepath, schema)
        if errors:
            print(f"FAIL: {filepath.name}")
            for error in errors:
                print(f"  {error}")
            all_valid = False
        else:
            print(f"OK: {filepath.name}")

    return 0 if all_valid else 1


if __name__ == "__main__":
    sys.exit(main())
