"""Initial schema: scores, game_cache and challenges.

Revision ID: 20261019_initial_schema
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

revision = "20261019_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "scores",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(100), nullable=True),
        sa.Column("user_email", sa.String(320), nullable=True),
        sa.Column("game_id", sa.String(200), nullable=False),
        sa.Column("mode", sa.String(20), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("metadata", postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("attempt_id", sa.String(64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("attempt_id", name="uq_scores_attempt_id"),
        sa.CheckConstraint("score >= 0", name="ck_scores_score_non_negative"),
        sa.CheckConstraint("mode IN ('daily', 'rewind', 'shuffle')", name="ck_scores_mode"),
    )
    op.create_index("ix_scores_user_id", "scores", ["user_id"])
    op.create_index("idx_scores_mode_rank", "scores", ["mode", "score", "created_at"])

    op.create_table(
        "game_cache",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("source_id", sa.String(200), nullable=False),
        sa.Column("source_api", sa.String(100), nullable=False),
        sa.Column("league", sa.String(20), nullable=True),
        sa.Column("payload", postgresql.JSONB(), nullable=False),
        sa.Column("fetched_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("needs_review", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("source_id", name="uq_game_cache_source_id"),
    )

    op.create_table(
        "challenges",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(100), nullable=False),
        sa.Column("game_id", sa.String(200), nullable=False),
        sa.Column("moment_index", sa.Integer(), nullable=True),
        sa.Column("reason", sa.String(50), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("moment_index IS NULL OR moment_index >= -1", name="ck_challenges_moment_index"),
        sa.CheckConstraint("comment IS NULL OR char_length(comment) <= 1000", name="ck_challenges_comment_length"),
    )
    op.create_index("ix_challenges_user_id", "challenges", ["user_id"])
    op.create_index("ix_challenges_game_id", "challenges", ["game_id"])


def downgrade() -> None:
    op.drop_index("ix_challenges_game_id", table_name="challenges")
    op.drop_index("ix_challenges_user_id", table_name="challenges")
    op.drop_table("challenges")
    op.drop_table("game_cache")
    op.drop_index("idx_scores_mode_rank", table_name="scores")
    op.drop_index("ix_scores_user_id", table_name="scores")
    op.drop_table("scores")
