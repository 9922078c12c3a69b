"""004: create bet_entries table

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE bet_entries (
            id          BIGSERIAL       PRIMARY KEY,
            bet_id      UUID            NOT NULL REFERENCES bets (id),
            user_id     UUID            NOT NULL REFERENCES users (id),
            side        VARCHAR(10)     NOT NULL,
            stake       BIGINT          NOT NULL,
            created_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_bet_entries_bet_user UNIQUE (bet_id, user_id),
            CONSTRAINT ck_bet_entries_side     CHECK (side IN ('FOR', 'AGAINST')),
            CONSTRAINT ck_bet_entries_stake    CHECK (stake > 0)
        );
    """)
    op.execute("CREATE INDEX idx_bet_entries_user ON bet_entries (user_id);")
    op.execute("""
        CREATE TRIGGER trg_bet_entries_updated_at
            BEFORE UPDATE ON bet_entries
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS bet_entries CASCADE;")
