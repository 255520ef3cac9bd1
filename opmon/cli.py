#!/usr/bin/env python3
"""
opmon-datasource command line

Exercises the query layer against a live OpMon connector:
- test:    connectivity check
- options: option list for one editor selector
- query:   execute a panel request read from a JSON file

Results are printed as JSON.
"""

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Optional

from .config import DatasourceConfig
from .datasource import OpmonDataSource
from .schemas import Query, QueryRequest, Scope

logger = logging.getLogger("opmon.cli")


def _load_json(path: Optional[Path]) -> Any:
    if path is None:
        return {}
    with open(path, "r") as f:
        return json.load(f)


def _frame_to_dict(df) -> Any:
    return {
        "name": df.attrs.get("name"),
        "refId": df.attrs.get("refId"),
        "rows": json.loads(df.to_json(orient="records", date_format="iso")),
    }


async def run_command(args: argparse.Namespace, datasource: OpmonDataSource) -> int:
    scope = Scope.model_validate(_load_json(args.vars)) if getattr(args, "vars", None) else Scope()

    if args.command == "test":
        result = await datasource.test_datasource()
        print(result.model_dump_json(indent=2))
        return 0 if result.status == "success" else 1

    if args.command == "options":
        query = Query.model_validate(_load_json(args.query))
        result = await datasource.fetch_field_options(args.field, query, scope)
        print(result.model_dump_json(indent=2))
        return 0 if result.status == "success" else 1

    request = QueryRequest.model_validate(_load_json(args.request))
    result = await datasource.query(request, scope)
    output = {
        "status": result.status,
        "message": result.message,
        "data": [_frame_to_dict(df) for df in result.data],
    }
    print(json.dumps(output, indent=2, default=str))
    return 0 if result.status == "success" else 1


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="OpMon data source query layer")
    parser.add_argument("--config", "-c", type=Path, default=Path("config.yml"),
                        help="YAML configuration file (default: config.yml)")
    parser.add_argument("--url", help="OpMon base URL (e.g., https://opmon.example.com)")
    parser.add_argument("--timeout", type=int, help="request timeout in seconds")
    parser.add_argument("--log-level", dest="log_level",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="logging level")
    parser.add_argument("--vars", type=Path,
                        help="JSON file with the variable scope (variables, scopedVars, adhocFilters)")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("test", help="check connectivity")

    options_parser = subparsers.add_parser("options", help="fetch options for a selector")
    options_parser.add_argument("field", help="selector (Host, Service, Hostgroup, Servicegroup, "
                                              "'Service catalog', metric, label, timeCut)")
    options_parser.add_argument("--query", type=Path, help="JSON file with the current query")

    query_parser = subparsers.add_parser("query", help="execute a request")
    query_parser.add_argument("request", type=Path, help="JSON file with the request")

    args = parser.parse_args(argv)

    # Load config: environment and YAML first, then CLI overrides
    config = DatasourceConfig.from_file(args.config).override_with_args(args)

    logging.basicConfig(level=getattr(logging, config.log_level.upper()))
    logger.debug(f"opmon-datasource using {config.base_url}")

    try:
        return asyncio.run(run_command(args, OpmonDataSource(config)))
    except KeyboardInterrupt:
        print("\nInterrupted. Bye!")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
