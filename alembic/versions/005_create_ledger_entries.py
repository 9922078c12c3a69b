"""005: create ledger_entries table

Revision ID: 005
Revises: 004
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE ledger_entries (
            id          BIGSERIAL       PRIMARY KEY,
            user_id     VARCHAR(64)     NOT NULL,
            amount      BIGINT          NOT NULL,
            entry_type  VARCHAR(20)     NOT NULL,
            bet_id      UUID            REFERENCES bets (id),
            metadata    JSONB,
            created_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_ledger_amount_nonzero CHECK (amount <> 0),
            CONSTRAINT ck_ledger_entry_type CHECK (
                entry_type IN ('STARTER', 'BET_STAKE', 'BET_PAYOUT',
                               'BET_REFUND', 'FEE', 'ADMIN_ADJUSTMENT')
            ),
            CONSTRAINT ck_ledger_bet_ref CHECK (
                entry_type IN ('STARTER', 'ADMIN_ADJUSTMENT') OR bet_id IS NOT NULL
            )
        );
    """)
    op.execute("CREATE INDEX idx_ledger_user_id ON ledger_entries (user_id, id DESC);")
    op.execute("CREATE INDEX idx_ledger_bet_id ON ledger_entries (bet_id) WHERE bet_id IS NOT NULL;")
    # At most one starter bonus per user, whatever the application does.
    op.execute("""
        CREATE UNIQUE INDEX uq_ledger_starter_once
            ON ledger_entries (user_id) WHERE entry_type = 'STARTER';
    """)
    op.execute("""
        CREATE TRIGGER trg_ledger_entries_append_only
            BEFORE UPDATE OR DELETE ON ledger_entries
            FOR EACH ROW EXECUTE FUNCTION fn_reject_modification();
    """)
    op.execute(
        "COMMENT ON TABLE ledger_entries IS "
        "'Append-only. Balance(u) = SUM(amount) WHERE user_id = u; no balance column';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS ledger_entries CASCADE;")
