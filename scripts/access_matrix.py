#!/usr/bin/env python3
"""Print the role x route access matrix for audit review.

Usage:
    python scripts/access_matrix.py                  # built-in table, text
    python scripts/access_matrix.py --table t.json   # custom table
    python scripts/access_matrix.py --features       # feature flags instead of routes
    python scripts/access_matrix.py --format json
"""

from __future__ import annotations

import argparse
import json
import sys

from hrportal.access.table import RoleAccessTable, default_access_table, load_access_table
from hrportal.exceptions import ConfigurationError
from hrportal.rbac import role_display_name


def _columns(table: RoleAccessTable, features: bool) -> list[str]:
    if features:
        return sorted({key for record in table.values() for key in record.features})
    return sorted({route for record in table.values() for route in record.routes})


def _granted(record, column: str, features: bool) -> bool:
    if features:
        return record.features.get(column) is True
    return column in record.routes


def render_text(table: RoleAccessTable, features: bool) -> str:
    columns = _columns(table, features)
    width = max(len(c) for c in columns)
    roles = list(table)
    lines = [" " * width + "  " + "  ".join(f"{i:>2}" for i in range(1, len(roles) + 1))]
    for column in columns:
        marks = "  ".join(
            " x" if _granted(table[role], column, features) else " ." for role in roles
        )
        lines.append(f"{column:<{width}}  {marks}")
    lines.append("")
    for i, role in enumerate(roles, start=1):
        lines.append(f"{i:>2}  {role_display_name(role.value)} (default {table[role].default_route})")
    return "\n".join(lines)


def render_json(table: RoleAccessTable, features: bool) -> str:
    columns = _columns(table, features)
    matrix = {
        role.value: [c for c in columns if _granted(record, c, features)]
        for role, record in table.items()
    }
    return json.dumps(matrix, indent=2)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--table", help="JSON access table (default: built-in)")
    parser.add_argument("--features", action="store_true", help="Show feature flags")
    parser.add_argument("--format", choices=("text", "json"), default="text")
    args = parser.parse_args(argv)

    try:
        table = load_access_table(args.table) if args.table else default_access_table()
    except ConfigurationError as e:
        print(f"error: {e.message}", file=sys.stderr)
        return 1

    render = render_json if args.format == "json" else render_text
    print(render(table, args.features))
    return 0


if __name__ == "__main__":
    sys.exit(main())
