"""
GiftKeeper — Entry Point.

`python main.py` loads the persisted stores and prints the upcoming
occasions briefing.
"""

import logging

from giftkeeper.config import settings

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

from giftkeeper.core.briefing import build_briefing
from giftkeeper.core.tracker import GiftTracker


def main() -> None:
    with GiftTracker() as tracker:
        tracker.hydrate()
        print(build_briefing(tracker))


if __name__ == "__main__":
    main()
