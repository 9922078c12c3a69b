"""006: create settlements table

Revision ID: 006
Revises: 005
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # bet_id as PRIMARY KEY is the exactly-once guard for settlement.
    op.execute("""
        CREATE TABLE settlements (
            bet_id         UUID            PRIMARY KEY REFERENCES bets (id),
            kind           VARCHAR(10)     NOT NULL,
            outcome        BOOLEAN,
            fee_bps        INT             NOT NULL DEFAULT 0,
            auto_voided    BOOLEAN         NOT NULL DEFAULT FALSE,
            settled_by_id  UUID            NOT NULL REFERENCES users (id),
            total_pot      BIGINT          NOT NULL,
            paid_out       BIGINT          NOT NULL,
            retained       BIGINT          NOT NULL,
            created_at     TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_settlements_kind    CHECK (kind IN ('RESOLVE', 'VOID')),
            CONSTRAINT ck_settlements_fee     CHECK (fee_bps >= 0 AND fee_bps <= 10000),
            CONSTRAINT ck_settlements_amounts CHECK (
                total_pot >= 0 AND paid_out >= 0 AND retained >= 0
                AND paid_out + retained = total_pot
            ),
            CONSTRAINT ck_settlements_auto_void CHECK (NOT auto_voided OR kind = 'VOID')
        );
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS settlements CASCADE;")
