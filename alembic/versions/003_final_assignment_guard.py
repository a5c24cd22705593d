"""Reject writes to delivery assignments once they are DELIVERED or FAILED

Revision ID: 003
Revises: 002
Create Date: 2026-10-17

Mirrors the ORM-level guard so raw SQL cannot rewrite a confirmed delivery
either. The stored (OLD) status decides: the confirming UPDATE itself moves
a PENDING row to its final status and is allowed.
"""
from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE OR REPLACE FUNCTION guard_final_delivery_assignment()
        RETURNS trigger AS $$
        BEGIN
            IF OLD.status IN ('DELIVERED', 'FAILED') THEN
                RAISE EXCEPTION 'delivery assignment % is % and can no longer change',
                    OLD.id, OLD.status
                    USING ERRCODE = 'check_violation';
            END IF;
            IF TG_OP = 'DELETE' THEN
                RETURN OLD;
            END IF;
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TRIGGER trg_delivery_assignments_final
        BEFORE UPDATE OR DELETE ON delivery_assignments
        FOR EACH ROW EXECUTE FUNCTION guard_final_delivery_assignment();
    """)


def downgrade() -> None:
    op.execute("DROP TRIGGER IF EXISTS trg_delivery_assignments_final ON delivery_assignments;")
    op.execute("DROP FUNCTION IF EXISTS guard_final_delivery_assignment();")
