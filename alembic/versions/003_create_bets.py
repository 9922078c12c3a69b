"""003: create bets table

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE bets (
            id                   UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            creator_id           UUID            NOT NULL REFERENCES users (id),
            title                VARCHAR(200)    NOT NULL,
            description          TEXT,
            category             VARCHAR(64),
            end_at               TIMESTAMPTZ     NOT NULL,
            max_participants     INT,
            visibility           VARCHAR(10)     NOT NULL DEFAULT 'PUBLIC',
            audience             VARCHAR(20)     NOT NULL DEFAULT 'PUBLIC',
            group_id             UUID,
            invite_code_enabled  BOOLEAN         NOT NULL DEFAULT FALSE,
            invite_salt          INT             NOT NULL DEFAULT 0,
            hide_participants    BOOLEAN         NOT NULL DEFAULT FALSE,
            status               VARCHAR(10)     NOT NULL DEFAULT 'OPEN',
            resolution           BOOLEAN,
            resolved_by_id       UUID            REFERENCES users (id),
            resolved_at          TIMESTAMPTZ,
            hidden               BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at           TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at           TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_bets_status      CHECK (status IN ('OPEN', 'RESOLVED', 'VOID')),
            CONSTRAINT ck_bets_visibility  CHECK (visibility IN ('PUBLIC', 'PRIVATE')),
            CONSTRAINT ck_bets_audience    CHECK (
                audience IN ('PUBLIC', 'FRIENDS', 'GROUP', 'INVITE_ONLY')
            ),
            CONSTRAINT ck_bets_group       CHECK (audience <> 'GROUP' OR group_id IS NOT NULL),
            CONSTRAINT ck_bets_max_participants CHECK (
                max_participants IS NULL OR max_participants >= 2
            ),
            CONSTRAINT ck_bets_invite_salt CHECK (invite_salt >= 0),
            CONSTRAINT ck_bets_resolution  CHECK (
                (status = 'RESOLVED') = (resolution IS NOT NULL)
            )
        );
    """)
    op.execute("CREATE INDEX idx_bets_status_end_at ON bets (status, end_at);")
    op.execute("CREATE INDEX idx_bets_creator ON bets (creator_id);")
    op.execute("""
        CREATE TRIGGER trg_bets_updated_at
            BEFORE UPDATE ON bets
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute(
        "COMMENT ON COLUMN bets.invite_salt IS "
        "'Rotation counter mixed into the invite HMAC; bump to revoke old codes';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS bets CASCADE;")
