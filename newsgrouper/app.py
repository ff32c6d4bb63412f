"""The long-running grouping service and its command-line entry point."""

from __future__ import annotations

import logging
import os
import re
import time
from datetime import timedelta
from typing import Any, Sequence

from .maker import GroupMaker

_INT_RE = re.compile(r"[+-]?\d+")
_GROUP_LIFETIME = timedelta(hours=1)
_POLL_SECONDS = 30.0

log = logging.getLogger(__name__)


def read_fraction(name: str, default: int) -> float:
    """Read a percentage from environment variable ``name`` as a fraction.

    Values that are not integers or lie outside 0..100 fall back to the
    ``default`` percentage.
    """
    raw = os.environ.get(name, "")
    if _INT_RE.fullmatch(raw) is None:
        log.info("Invalid %s value %r, using default value", name, raw)
        value = default
    else:
        value = int(raw)
    if not 0 <= value <= 100:
        value = default
    return value / 100


class App:
    """Runs the group maker over and over, pausing between rounds."""

    def __init__(self, maker: Any, timeout: float, logger: logging.Logger | None = None) -> None:
        self._maker = maker
        self._timeout = timeout
        self._logger = logger or log

    @classmethod
    def create(
        cls,
        diff: float,
        max_distance: float,
        alpha: float,
        timeout: float,
        logger: logging.Logger | None = None,
    ) -> App:
        """Build an app whose maker is wired from the environment."""
        logger = logger or log
        maker = GroupMaker.from_env(diff, max_distance, alpha, _GROUP_LIFETIME, logger)
        return cls(maker, timeout, logger)

    def run_once(self) -> bool:
        """Run one round; return whether it finished without error."""
        try:
            self._maker.update_groups()
        except Exception as exc:
            self._logger.error("%s", exc)
            return False
        return True

    def run(self) -> None:
        """Run rounds forever."""
        while True:
            self.run_once()
            time.sleep(self._timeout)


def main(argv: Sequence[str] | None = None) -> None:
    """Start the grouping service with settings from the environment."""
    logging.basicConfig(level=logging.INFO)
    diff = read_fraction("DIFF", 85)
    alpha = read_fraction("ALPHA", 20)
    distance = read_fraction("DISTANCE", 20)
    log.info("DIFF: %s, ALPHA: %s, DISTANCE: %s", diff, alpha, distance)
    App.create(diff, distance, alpha, _POLL_SECONDS, logging.getLogger("newsgrouper")).run()


if __name__ == "__main__":
    main()