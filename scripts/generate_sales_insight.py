from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from datetime import date
from typing import Any, Dict, Optional

SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.abspath(os.path.join(SCRIPT_DIR, ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


def load_env_file(env_path: str) -> None:
    if not os.path.exists(env_path):
        return
    with open(env_path, "r", encoding="utf-8") as env_file:
        for line in env_file:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            os.environ.setdefault(key, value)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a company-wide sales insight from recorded sales.")
    parser.add_argument("--env-file", default=".env", help="Environment file path (default: .env).")
    parser.add_argument("--start-date", type=date.fromisoformat, help="First day of the range (YYYY-MM-DD).")
    parser.add_argument("--end-date", type=date.fromisoformat, help="Last day of the range (YYYY-MM-DD).")
    return parser.parse_args()


async def run_generation(start_date: Optional[date], end_date: Optional[date]) -> Dict[str, Any]:
    from src.api.dependencies import (
        get_aggregation_service,
        get_branches_repository,
        get_sales_records_repository,
        get_text_generation_service,
        get_users_repository,
    )
    from src.services.insights_service import InsightsService

    service = InsightsService(
        aggregation_service=get_aggregation_service(
            get_sales_records_repository(), get_users_repository(), get_branches_repository()
        ),
        text_generation_service=get_text_generation_service(),
    )
    if start_date and end_date:
        insight = await service.get_insight_for_range(start_date, end_date)
    else:
        insight = await service.get_recent_insight()
    return insight.model_dump(mode="json", by_alias=True)


def main() -> None:
    args = parse_args()
    if bool(args.start_date) != bool(args.end_date):
        raise SystemExit("--start-date and --end-date must be given together")
    load_env_file(args.env_file)

    from src.core.logging import configure_logging

    configure_logging()
    result = asyncio.run(run_generation(args.start_date, args.end_date))
    print(json.dumps(result, indent=2, sort_keys=True))


if __name__ == "__main__":
    main()
