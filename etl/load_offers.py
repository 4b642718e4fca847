import sys
import json
import logging
from pathlib import Path

# Add project root to sys.path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from config import DB_URL, LOG_LEVEL
from core.database import make_engine, make_session_factory
from core.store import OfferStoreError, upsert_new
from etl.normalize import normalize_offers

logger = logging.getLogger(__name__)

REQUEST_ENVELOPE = "flipkartOfferApiResponse"


def read_payload(path):
    """Read a saved offer API response, with or without the request body envelope."""
    with open(path, encoding="utf-8") as f:
        payload = json.load(f)
    if isinstance(payload, dict) and isinstance(payload.get(REQUEST_ENVELOPE), dict):
        return payload[REQUEST_ENVELOPE]
    return payload


def load_offers(payload, session_factory):
    candidates = normalize_offers(payload)
    session = session_factory()
    try:
        return upsert_new(session, candidates)
    finally:
        session.close()


def main(argv=None):
    import argparse
    parser = argparse.ArgumentParser(description="Load offers from a saved Flipkart offer API response.")
    parser.add_argument("path", help="JSON file with the offer API response.")
    parser.add_argument("--dry-run", action="store_true", help="Parse only, don't write to DB.")
    parser.add_argument("--db-url", default=DB_URL, help="Database URL (defaults to DB_URL).")
    args = parser.parse_args(argv)

    try:
        payload = read_payload(args.path)
    except (OSError, ValueError) as e:
        logger.error("Could not read %s: %s", args.path, e)
        return 1

    if args.dry_run:
        candidates = normalize_offers(payload)
        print(f"Dry run complete. {len(candidates)} offers identified:")
        for offer in candidates:
            print(offer.model_dump_json())
        return 0

    engine = make_engine(args.db_url)
    try:
        result = load_offers(payload, make_session_factory(engine))
    except OfferStoreError as e:
        logger.error("Loading offers failed: %s", e)
        return 1
    finally:
        engine.dispose()

    print(f"Offers identified: {result.identified}, new offers created: {result.created}")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    sys.exit(main())
