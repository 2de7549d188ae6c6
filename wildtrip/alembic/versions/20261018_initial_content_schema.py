"""initial content schema

Revision ID: 1a2b3c4d5e6f
Revises:
Create Date: 2026-10-18 09:00:00.000000

Creates the users table and the three content tables (species,
protected_areas, news). Every content table carries the same lifecycle,
draft overlay and edit lock columns.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
import advanced_alchemy.types


# revision identifiers, used by Alembic.
revision: str = '1a2b3c4d5e6f'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

CONTENT_TABLES = ('species', 'protected_areas', 'news')


def _id_column() -> sa.Column:
    return sa.Column(
        'id',
        sa.BigInteger().with_variant(sa.Integer(), 'sqlite'),
        sa.Identity(always=False),
        nullable=False,
    )


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column('created_at', advanced_alchemy.types.DateTimeUTC(timezone=True), nullable=False),
        sa.Column('updated_at', advanced_alchemy.types.DateTimeUTC(timezone=True), nullable=False),
    ]


def _content_columns(table: str) -> list:
    return [
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('published_at', advanced_alchemy.types.DateTimeUTC(timezone=True), nullable=True),
        sa.Column('seo_title', sa.String(length=255), nullable=True),
        sa.Column('seo_description', sa.String(length=500), nullable=True),
        sa.Column('seo_keywords', sa.String(length=500), nullable=True),
        sa.Column('draft_data', advanced_alchemy.types.JsonB(), nullable=True),
        sa.Column('has_draft', sa.Boolean(), nullable=False),
        sa.Column('draft_created_at', advanced_alchemy.types.DateTimeUTC(timezone=True), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('locked_by', sa.BigInteger().with_variant(sa.Integer(), 'sqlite'), nullable=True),
        sa.Column('locked_at', advanced_alchemy.types.DateTimeUTC(timezone=True), nullable=True),
        sa.Column('lock_expires_at', advanced_alchemy.types.DateTimeUTC(timezone=True), nullable=True),
        *_audit_columns(),
        sa.ForeignKeyConstraint(['locked_by'], ['users.id'], name=op.f(f'fk_{table}_locked_by_users'), ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id', name=op.f(f'pk_{table}')),
    ]


def _create_content_indexes(table: str, *columns: str) -> None:
    op.create_index(op.f(f'ix_{table}_slug'), table, ['slug'], unique=True)
    op.create_index(op.f(f'ix_{table}_status'), table, ['status'], unique=False)
    op.create_index(op.f(f'ix_{table}_locked_by'), table, ['locked_by'], unique=False)
    for column in columns:
        op.create_index(op.f(f'ix_{table}_{column}'), table, [column], unique=False)


def upgrade() -> None:
    op.create_table('users',
        _id_column(),
        sa.Column('external_id', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('username', sa.String(length=255), nullable=True),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('avatar_url', sa.Text(), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('role', sa.String(length=50), nullable=False),
        *_audit_columns(),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_users')),
    )
    op.create_index(op.f('ix_users_external_id'), 'users', ['external_id'], unique=True)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=False)

    op.create_table('species',
        _id_column(),
        sa.Column('common_name', sa.String(length=255), nullable=False),
        sa.Column('scientific_name', sa.String(length=255), nullable=False),
        sa.Column('kingdom', sa.String(length=100), nullable=True),
        sa.Column('phylum', sa.String(length=100), nullable=True),
        sa.Column('class', sa.String(length=100), nullable=True),
        sa.Column('order', sa.String(length=100), nullable=True),
        sa.Column('family', sa.String(length=100), nullable=True),
        sa.Column('main_group', sa.String(length=50), nullable=True),
        sa.Column('specific_category', sa.String(length=100), nullable=True),
        sa.Column('conservation_status', sa.String(length=50), nullable=True),
        sa.Column('habitat', sa.Text(), nullable=True),
        sa.Column('distribution', sa.Text(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('distinctive_features', sa.Text(), nullable=True),
        sa.Column('rich_content', advanced_alchemy.types.JsonB(), nullable=True),
        sa.Column('references', advanced_alchemy.types.JsonB(), nullable=True),
        sa.Column('main_image', advanced_alchemy.types.JsonB(), nullable=True),
        sa.Column('gallery_images', advanced_alchemy.types.JsonB(), nullable=True),
        *_content_columns('species'),
    )
    _create_content_indexes('species', 'main_group', 'conservation_status')

    op.create_table('protected_areas',
        _id_column(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('type', sa.String(length=50), nullable=True),
        sa.Column('region', sa.String(length=50), nullable=True),
        sa.Column('location', advanced_alchemy.types.JsonB(), nullable=True),
        sa.Column('area', sa.Integer(), nullable=True),
        sa.Column('creation_year', sa.Integer(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('ecosystems', advanced_alchemy.types.JsonB(), nullable=True),
        sa.Column('key_species', advanced_alchemy.types.JsonB(), nullable=True),
        sa.Column('visitor_information', advanced_alchemy.types.JsonB(), nullable=True),
        sa.Column('rich_content', advanced_alchemy.types.JsonB(), nullable=True),
        sa.Column('main_image', advanced_alchemy.types.JsonB(), nullable=True),
        sa.Column('gallery_images', advanced_alchemy.types.JsonB(), nullable=True),
        *_content_columns('protected_areas'),
    )
    _create_content_indexes('protected_areas', 'type', 'region')

    op.create_table('news',
        _id_column(),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('author', sa.String(length=255), nullable=True),
        sa.Column('category', sa.String(length=50), nullable=True),
        sa.Column('summary', sa.Text(), nullable=True),
        sa.Column('content', advanced_alchemy.types.JsonB(), nullable=True),
        sa.Column('tags', advanced_alchemy.types.JsonB(), nullable=True),
        sa.Column('main_image', advanced_alchemy.types.JsonB(), nullable=True),
        *_content_columns('news'),
    )
    _create_content_indexes('news', 'category')


def downgrade() -> None:
    for table in reversed(CONTENT_TABLES):
        op.drop_table(table)
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_index(op.f('ix_users_external_id'), table_name='users')
    op.drop_table('users')
