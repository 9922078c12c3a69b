"""Ledger-wide invariant checks.

Read-only SQL over the whole database. Each check returns human-readable
violation strings; an empty list means the ledger is consistent.

    net zero      every settled bet's ledger rows sum to exactly 0
    void refund   a VOID settlement refunded exactly its total pot
    net pot       a RESOLVE settlement paid out no more than its net pot
    marker        settlement rows agree with their bet's status and totals
    stake book    bet_entries.stake totals equal the BET_STAKE debits
    balance       no user balance is negative
"""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_ledger.domain.models import PLATFORM_FEE_ACCOUNT

logger = logging.getLogger(__name__)

_NET_ZERO_SQL = text("""
    SELECT l.bet_id, CAST(SUM(l.amount) AS BIGINT) AS net
    FROM ledger_entries l
    JOIN settlements s ON s.bet_id = l.bet_id
    GROUP BY l.bet_id
    HAVING SUM(l.amount) <> 0
""")

_VOID_REFUND_SQL = text("""
    SELECT s.bet_id, s.total_pot,
           CAST(COALESCE(SUM(l.amount), 0) AS BIGINT) AS refunded
    FROM settlements s
    LEFT JOIN ledger_entries l
           ON l.bet_id = s.bet_id AND l.entry_type = 'BET_REFUND'
    WHERE s.kind = 'VOID'
    GROUP BY s.bet_id, s.total_pot
    HAVING COALESCE(SUM(l.amount), 0) <> s.total_pot
""")

_NET_POT_SQL = text("""
    SELECT s.bet_id, s.total_pot, s.fee_bps,
           CAST(COALESCE(SUM(l.amount), 0) AS BIGINT) AS paid
    FROM settlements s
    LEFT JOIN ledger_entries l
           ON l.bet_id = s.bet_id AND l.entry_type = 'BET_PAYOUT'
    WHERE s.kind = 'RESOLVE'
    GROUP BY s.bet_id, s.total_pot, s.fee_bps
    HAVING COALESCE(SUM(l.amount), 0) > s.total_pot - (s.total_pot * s.fee_bps) / 10000
""")

_MARKER_STATUS_SQL = text("""
    SELECT b.id, b.status, s.kind
    FROM bets b
    LEFT JOIN settlements s ON s.bet_id = b.id
    WHERE (b.status = 'OPEN' AND s.bet_id IS NOT NULL)
       OR (b.status = 'RESOLVED' AND (s.kind IS NULL OR s.kind <> 'RESOLVE'))
       OR (b.status = 'VOID' AND (s.kind IS NULL OR s.kind <> 'VOID'))
       OR (b.status = 'RESOLVED' AND b.resolution IS NULL)
       OR (b.status <> 'RESOLVED' AND b.resolution IS NOT NULL)
""")

_STAKE_BOOK_SQL = text("""
    WITH book AS (
        SELECT bet_id, SUM(stake) AS staked FROM bet_entries GROUP BY bet_id
    ), debits AS (
        SELECT bet_id, -SUM(amount) AS debited
        FROM ledger_entries WHERE entry_type = 'BET_STAKE'
        GROUP BY bet_id
    )
    SELECT COALESCE(book.bet_id, debits.bet_id) AS bet_id,
           CAST(COALESCE(book.staked, 0) AS BIGINT) AS staked,
           CAST(COALESCE(debits.debited, 0) AS BIGINT) AS debited
    FROM book FULL OUTER JOIN debits ON debits.bet_id = book.bet_id
    WHERE COALESCE(book.staked, 0) <> COALESCE(debits.debited, 0)
""")

_NEGATIVE_BALANCE_SQL = text("""
    SELECT user_id, CAST(SUM(amount) AS BIGINT) AS balance
    FROM ledger_entries
    WHERE user_id <> :platform
    GROUP BY user_id
    HAVING SUM(amount) < 0
""")


async def verify_ledger_invariants(db: AsyncSession) -> list[str]:
    violations: list[str] = []

    for row in (await db.execute(_NET_ZERO_SQL)).fetchall():
        violations.append(f"bet {row.bet_id}: settled ledger rows net to {row.net}, expected 0")

    for row in (await db.execute(_VOID_REFUND_SQL)).fetchall():
        violations.append(
            f"bet {row.bet_id}: void refunded {row.refunded} of pot {row.total_pot}"
        )

    for row in (await db.execute(_NET_POT_SQL)).fetchall():
        violations.append(
            f"bet {row.bet_id}: paid out {row.paid} exceeds net pot "
            f"(pot={row.total_pot}, fee_bps={row.fee_bps})"
        )

    for row in (await db.execute(_MARKER_STATUS_SQL)).fetchall():
        violations.append(
            f"bet {row.id}: status {row.status} inconsistent with settlement kind {row.kind}"
        )

    for row in (await db.execute(_STAKE_BOOK_SQL)).fetchall():
        violations.append(
            f"bet {row.bet_id}: stake book holds {row.staked}, ledger debited {row.debited}"
        )

    for row in (
        await db.execute(_NEGATIVE_BALANCE_SQL, {"platform": PLATFORM_FEE_ACCOUNT})
    ).fetchall():
        violations.append(f"user {row.user_id}: negative balance {row.balance}")

    for msg in violations:
        logger.error("Invariant violated: %s", msg)
    return violations
