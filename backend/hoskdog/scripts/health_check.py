"""Container health probe: exit 0 when ``/api/health`` answers 200."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

import requests

LOGGER = logging.getLogger(__name__)

DEFAULT_URL = "http://localhost:4000/api/health"


def check_health(url: str = DEFAULT_URL, timeout: float = 5.0) -> bool:
    try:
        response = requests.get(url, timeout=timeout)
    except requests.Timeout:
        LOGGER.error("Health check timeout")
        return False
    except requests.RequestException as exc:
        LOGGER.error("Health check error: %s", exc)
        return False

    if response.status_code != 200:
        LOGGER.error("Health check failed with status: %s", response.status_code)
        return False

    LOGGER.info("Health check passed")
    return True


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--url", default=DEFAULT_URL, help="Health endpoint to probe")
    parser.add_argument("--timeout", type=float, default=5.0, help="Request timeout in seconds")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    return 0 if check_health(args.url, args.timeout) else 1


if __name__ == "__main__":
    sys.exit(main())
