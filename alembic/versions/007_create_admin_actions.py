"""007: create admin_actions table

Revision ID: 007
Revises: 006
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE admin_actions (
            id           BIGSERIAL       PRIMARY KEY,
            admin_id     UUID            NOT NULL REFERENCES users (id),
            action       VARCHAR(32)     NOT NULL,
            target_type  VARCHAR(10)     NOT NULL,
            target_id    VARCHAR(64)     NOT NULL,
            detail       JSONB,
            created_at   TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_admin_actions_action CHECK (
                action IN ('RESOLVE_BET', 'VOID_BET', 'HIDE_BET', 'UNHIDE_BET',
                           'GRANT_FUNDS', 'APPROVE_USER', 'SET_USER_STATUS')
            ),
            CONSTRAINT ck_admin_actions_target CHECK (target_type IN ('BET', 'USER'))
        );
    """)
    op.execute("CREATE INDEX idx_admin_actions_action ON admin_actions (action, id DESC);")
    op.execute("""
        CREATE TRIGGER trg_admin_actions_append_only
            BEFORE UPDATE OR DELETE ON admin_actions
            FOR EACH ROW EXECUTE FUNCTION fn_reject_modification();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS admin_actions CASCADE;")
