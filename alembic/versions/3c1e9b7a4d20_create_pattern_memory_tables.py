"""create pattern memory and practice attempt tables

Revision ID: 3c1e9b7a4d20
Revises:
Create Date: 2026-10-18 09:10:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3c1e9b7a4d20"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "drum_pattern_memory",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("pattern_id", sa.String(length=64), nullable=False),
        sa.Column("ease_factor", sa.Float(), server_default="2.5", nullable=False),
        sa.Column("interval_days", sa.Integer(), server_default="0", nullable=False),
        sa.Column("repetitions", sa.Integer(), server_default="0", nullable=False),
        sa.Column("next_review_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_quality", sa.Integer(), nullable=True),
        sa.Column("last_practiced_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("version_id", sa.Integer(), server_default="1", nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "pattern_id", name="uq_pattern_memory_user_pattern"),
    )
    op.create_index("ix_drum_pattern_memory_user_id", "drum_pattern_memory", ["user_id"], unique=False)
    op.create_index("ix_drum_pattern_memory_pattern_id", "drum_pattern_memory", ["pattern_id"], unique=False)

    op.create_table(
        "drum_practice_attempts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("pattern_id", sa.String(length=64), nullable=False),
        sa.Column("practiced_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("quality", sa.Integer(), nullable=False),
        sa.Column("tempo_bpm", sa.Integer(), nullable=True),
        sa.Column("duration_seconds", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_drum_practice_attempts_user_id", "drum_practice_attempts", ["user_id"], unique=False)
    op.create_index(
        "ix_drum_practice_attempts_pattern_id",
        "drum_practice_attempts",
        ["pattern_id"],
        unique=False,
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_drum_practice_attempts_pattern_id", table_name="drum_practice_attempts")
    op.drop_index("ix_drum_practice_attempts_user_id", table_name="drum_practice_attempts")
    op.drop_table("drum_practice_attempts")
    op.drop_index("ix_drum_pattern_memory_pattern_id", table_name="drum_pattern_memory")
    op.drop_index("ix_drum_pattern_memory_user_id", table_name="drum_pattern_memory")
    op.drop_table("drum_pattern_memory")
