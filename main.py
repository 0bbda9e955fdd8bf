"""
Command-line entry point.

    python main.py -7.7956 110.3695
    python main.py --health
"""

import json
import sys
from typing import List, Optional

from core.config import Settings, configure_logging
from core.orchestrator import RiskAnalysisService


def main(argv: Optional[List[str]] = None) -> int:
    """Run one analysis (or a health / environment report) from the command line."""
    import argparse

    parser = argparse.ArgumentParser(description="DIY Yogyakarta Landslide Risk Analysis")
    parser.add_argument("latitude", nargs="?", help="Latitude in decimal degrees, e.g. -7.7956")
    parser.add_argument("longitude", nargs="?", help="Longitude in decimal degrees, e.g. 110.3695")
    parser.add_argument("--health", action="store_true", help="Print the health report instead of analyzing")
    parser.add_argument("--test-env", action="store_true", help="Print the environment configuration summary")

    args = parser.parse_args(argv)

    settings = Settings.from_env()
    configure_logging(settings.log_level)
    service = RiskAnalysisService.from_settings(settings)

    if args.health or args.test_env:
        result = service.describe(health=args.health, test_env=args.test_env)
    elif args.latitude is None or args.longitude is None:
        parser.print_usage(sys.stderr)
        return 2
    else:
        # Strings go through the same numeric validation as HTTP bodies
        result = service.analyze({"latitude": args.latitude, "longitude": args.longitude})

    print(json.dumps(result.body, indent=2, ensure_ascii=False))
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
