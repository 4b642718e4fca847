import logging
from typing import NamedTuple

from sqlalchemy import cast, select
from sqlalchemy.dialects.postgresql import JSONB, insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError

from core.models import Offer

logger = logging.getLogger(__name__)

# Dialects whose INSERT supports ON CONFLICT DO NOTHING
_INSERTS = {
    'postgresql': pg_insert,
    'sqlite': sqlite_insert,
}


class OfferStoreError(Exception):
    """The offer store could not complete a read or write."""


class IngestResult(NamedTuple):
    identified: int
    created: int


def _existing_ids(session, adjustment_ids):
    stmt = select(Offer.adjustment_id).where(Offer.adjustment_id.in_(adjustment_ids))
    return set(session.scalars(stmt))


def upsert_new(session, candidates):
    """
    Insert the candidates whose adjustment_id is not stored yet.

    Existing offers are never updated. A row that appears between the existence
    check and the insert (concurrent ingestion) is skipped by the database and
    simply not counted as created.
    """
    candidates = list(candidates)
    if not candidates:
        return IngestResult(identified=0, created=0)

    dialect = session.get_bind().dialect.name
    insert = _INSERTS.get(dialect)
    if insert is None:
        raise OfferStoreError(f"Unsupported database dialect: {dialect}")

    try:
        seen = _existing_ids(session, {c.adjustment_id for c in candidates})
        new_rows = []
        for candidate in candidates:
            if candidate.adjustment_id in seen:
                continue
            seen.add(candidate.adjustment_id)
            new_rows.append(candidate.to_row())

        created = 0
        if new_rows:
            stmt = insert(Offer).values(new_rows)
            stmt = stmt.on_conflict_do_nothing(index_elements=['adjustment_id'])
            result = session.execute(stmt)
            created = max(result.rowcount, 0)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Failed to store %d offer candidates: %s", len(candidates), e)
        raise OfferStoreError(str(e)) from e

    if created:
        logger.info("Created %d new offers.", created)
    return IngestResult(identified=len(candidates), created=created)


def _entries(offer):
    for entry in offer.payment_instruments or []:
        if isinstance(entry, dict):
            yield entry.get('instrument'), entry.get('banks') or []
        else:
            yield entry.instrument, entry.banks


def offer_matches(offer, bank_name, payment_instrument=None):
    """
    True when some entry lists the bank and, if an instrument is requested,
    some entry is that instrument.
    """
    entries = list(_entries(offer))
    if not any(bank_name in banks for _, banks in entries):
        return False
    if payment_instrument is None:
        return True
    return any(instrument == payment_instrument for instrument, _ in entries)


def applicable_offers_query(dialect, amount_to_pay, bank_name, payment_instrument=None):
    """
    SELECT for offers whose threshold is met. On PostgreSQL the bank and
    instrument are matched in SQL too, by JSONB containment.
    """
    stmt = select(Offer).where(Offer.min_trxn_value <= amount_to_pay)
    if dialect == 'postgresql':
        instruments = cast(Offer.payment_instruments, JSONB)
        stmt = stmt.where(instruments.contains([{'banks': [bank_name]}]))
        if payment_instrument is not None:
            stmt = stmt.where(instruments.contains([{'instrument': payment_instrument}]))
    return stmt


def find_applicable(session, amount_to_pay, bank_name, payment_instrument=None):
    """Offers whose threshold is met and which apply to the bank (and instrument)."""
    dialect = session.get_bind().dialect.name
    stmt = applicable_offers_query(dialect, amount_to_pay, bank_name, payment_instrument)
    try:
        offers = session.scalars(stmt).all()
    except SQLAlchemyError as e:
        logger.error("Failed to read offers: %s", e)
        raise OfferStoreError(str(e)) from e
    return [o for o in offers if offer_matches(o, bank_name, payment_instrument)]
