"""Initial schema - All tables

Revision ID: 001_initial
Revises:
Create Date: 2026-10-01 00:00:00.000000

Creates the source tables (businesses, reviews), the derived stats
table, the ranked set tables and the refresh lease.
Based on the SQLAlchemy models defined in database/models/.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ==================================================
    # SOURCE TABLES
    # ==================================================

    op.create_table(
        'businesses',
        sa.Column('id', sa.String(50), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('slug', sa.String(200), nullable=True, unique=True),
        sa.Column('category', sa.String(100), nullable=True),
        sa.Column('location', sa.String(200), nullable=True),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('image_url', sa.Text, nullable=True),
        sa.Column('price_range', sa.String(10), nullable=True),
        sa.Column('verified', sa.Boolean, nullable=True),
        sa.Column('status', sa.String(20), nullable=True),
        sa.Column('lat', sa.Float, nullable=True),
        sa.Column('lng', sa.Float, nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.Column('updated_at', sa.DateTime, nullable=True),
    )
    op.create_index('ix_businesses_category', 'businesses', ['category'])
    op.create_index('ix_businesses_status', 'businesses', ['status'])
    op.create_index('ix_businesses_created_at', 'businesses', ['created_at'])

    op.create_table(
        'reviews',
        sa.Column('id', sa.String(50), primary_key=True),
        sa.Column('business_id', sa.String(50), sa.ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.String(50), nullable=True),
        sa.Column('rating', sa.Integer, nullable=False),
        sa.Column('tags', sa.JSON, nullable=True),
        sa.Column('content', sa.Text, nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.Column('updated_at', sa.DateTime, nullable=True),
    )
    op.create_index('ix_reviews_business_id', 'reviews', ['business_id'])
    op.create_index('ix_reviews_created_at', 'reviews', ['created_at'])
    op.create_index('idx_reviews_business_created', 'reviews', ['business_id', 'created_at'])

    # ==================================================
    # DERIVED STATS
    # ==================================================

    op.create_table(
        'business_stats',
        sa.Column('business_id', sa.String(50), sa.ForeignKey('businesses.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('total_reviews', sa.Integer, nullable=True),
        sa.Column('average_rating', sa.Float, nullable=True),
        sa.Column('rating_distribution', sa.JSON, nullable=False),
        sa.Column('percentiles', sa.JSON, nullable=False),
        sa.Column('raw_tag_scores', sa.JSON, nullable=True),
        sa.Column('updated_at', sa.DateTime, nullable=True),
    )

    # ==================================================
    # RANKED SETS
    # ==================================================

    op.create_table(
        'ranked_entries',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('set_name', sa.String(30), nullable=False),
        sa.Column('generation', sa.Integer, nullable=False),
        sa.Column('position', sa.Integer, nullable=False),
        sa.Column('business_id', sa.String(50), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('slug', sa.String(200), nullable=True),
        sa.Column('category', sa.String(100), nullable=True),
        sa.Column('location', sa.String(200), nullable=True),
        sa.Column('image_url', sa.Text, nullable=True),
        sa.Column('verified', sa.Boolean, nullable=True),
        sa.Column('price_range', sa.String(10), nullable=True),
        sa.Column('latitude', sa.Float, nullable=True),
        sa.Column('longitude', sa.Float, nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.Column('total_reviews', sa.Integer, nullable=True),
        sa.Column('average_rating', sa.Float, nullable=True),
        sa.Column('percentiles', sa.JSON, nullable=True),
        sa.Column('score', sa.Float, nullable=True),
        sa.Column('recent_reviews_7d', sa.Integer, nullable=True),
        sa.Column('recent_reviews_30d', sa.Integer, nullable=True),
        sa.Column('recent_avg_rating', sa.Float, nullable=True),
        sa.Column('days_old', sa.Integer, nullable=True),
        sa.Column('last_refreshed', sa.DateTime, nullable=False),
        sa.UniqueConstraint('set_name', 'generation', 'position', name='uq_ranked_entries_slot'),
    )
    op.create_index('idx_ranked_entries_category', 'ranked_entries', ['set_name', 'generation', 'category'])

    op.create_table(
        'ranked_set_versions',
        sa.Column('set_name', sa.String(30), primary_key=True),
        sa.Column('current_generation', sa.Integer, nullable=True),
        sa.Column('entry_count', sa.Integer, nullable=True),
        sa.Column('refreshed_at', sa.DateTime, nullable=True),
        sa.Column('last_error', sa.Text, nullable=True),
        sa.Column('last_error_at', sa.DateTime, nullable=True),
    )

    op.create_table(
        'refresh_leases',
        sa.Column('name', sa.String(50), primary_key=True),
        sa.Column('holder', sa.String(64), nullable=True),
        sa.Column('acquired_at', sa.DateTime, nullable=True),
        sa.Column('expires_at', sa.DateTime, nullable=True),
    )


def downgrade() -> None:
    op.drop_table('refresh_leases')
    op.drop_table('ranked_set_versions')
    op.drop_index('idx_ranked_entries_category', table_name='ranked_entries')
    op.drop_table('ranked_entries')
    op.drop_table('business_stats')
    op.drop_index('idx_reviews_business_created', table_name='reviews')
    op.drop_index('ix_reviews_created_at', table_name='reviews')
    op.drop_index('ix_reviews_business_id', table_name='reviews')
    op.drop_table('reviews')
    op.drop_index('ix_businesses_created_at', table_name='businesses')
    op.drop_index('ix_businesses_status', table_name='businesses')
    op.drop_index('ix_businesses_category', table_name='businesses')
    op.drop_table('businesses')
