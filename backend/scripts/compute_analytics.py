"""Compute portfolio analytics for a JSON payload exported from the dashboard."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from app.config import get_settings
from app.core.logging import setup_logging
from app.schemas import PortfolioAnalyticsRequest
from app.services.analytics import portfolio_analytics


def main() -> None:
    parser = argparse.ArgumentParser(description="Compute FIFO cost-basis analytics for a portfolio payload")
    parser.add_argument("payload_file", help="JSON file with assets, transactions and transfers")
    parser.add_argument("--from-ms", type=int, default=None, help="Start of the range window (epoch ms)")
    parser.add_argument("--to-ms", type=int, default=None, help="End of the range window (epoch ms)")
    parser.add_argument("--indent", type=int, default=2)
    args = parser.parse_args()

    payload_path = Path(args.payload_file)
    if not payload_path.exists():
        raise SystemExit(f"Payload file not found: {payload_path}")
    payload = json.loads(payload_path.read_text())
    if args.from_ms is not None:
        payload["fromMs"] = args.from_ms
    if args.to_ms is not None:
        payload["toMs"] = args.to_ms

    settings = get_settings()
    setup_logging(settings.log_level)
    request = PortfolioAnalyticsRequest.model_validate(payload)
    summary = portfolio_analytics(request, settings)
    print(summary.model_dump_json(by_alias=True, indent=args.indent))


if __name__ == "__main__":
    main()
