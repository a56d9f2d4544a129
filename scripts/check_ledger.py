import argparse
import logging
import sys

from backoffice.core.logging import setup_logging
from backoffice.database import SessionLocal
from backoffice.services.ledger_store import find_balance_drift

logger = logging.getLogger(__name__)


def parse_args():
    parser = argparse.ArgumentParser(
        description="Compare cached product stock with the stock movement ledger."
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only set the exit status; do not list drifting products.",
    )
    return parser.parse_args()


def main():
    setup_logging()
    args = parse_args()

    db = SessionLocal()
    try:
        drift = find_balance_drift(db)
    finally:
        db.close()

    if not drift:
        logger.info("Ledger check passed: every balance matches its movements.")
        return 0

    if not args.quiet:
        for entry in drift:
            logger.warning(
                "Product %s (%s): stock %s, ledger says %s",
                entry["product_id"],
                entry["name"],
                entry["stock"],
                entry["expected"],
            )
    logger.error("Ledger check failed for %s product(s).", len(drift))
    return 1


if __name__ == "__main__":
    sys.exit(main())
