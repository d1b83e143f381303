"""initial_schema_admins_services_banners

Revision ID: 001
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # Create admins table
    op.create_table(
        'admins',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('name', sa.String(50), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('username', sa.String(30), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='admin'),
        sa.Column('refresh_token', sa.Text(), nullable=True),
        sa.Column('login_attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('lock_until', sa.DateTime(), nullable=True),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('email_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_admins_id', 'admins', ['id'])
    op.create_index('ix_admins_email', 'admins', ['email'], unique=True)
    op.create_index('ix_admins_username', 'admins', ['username'], unique=True)
    op.create_index('ix_admins_role', 'admins', ['role'])
    op.create_index(
        'uq_admins_single_super_admin',
        'admins',
        ['role'],
        unique=True,
        postgresql_where=sa.text("role = 'super_admin'"),
        sqlite_where=sa.text("role = 'super_admin'"),
    )

    # Create services table
    op.create_table(
        'services',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('title', sa.String(100), nullable=False),
        sa.Column('slug', sa.String(120), nullable=False),
        sa.Column('subtitle', sa.String(250), nullable=True),
        sa.Column('short_description', sa.String(350), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('icon_name', sa.String(32), nullable=False, server_default='BarChart3'),
        sa.Column('hero_image_url', sa.String(), nullable=False),
        sa.Column('hero_image_public_id', sa.String(), nullable=False),
        sa.Column('hero_image_width', sa.Integer(), nullable=True),
        sa.Column('hero_image_height', sa.Integer(), nullable=True),
        sa.Column('hero_image_format', sa.String(16), nullable=True),
        sa.Column('hero_image_size', sa.Integer(), nullable=True),
        sa.Column('research_types', sa.JSON(), nullable=False),
        sa.Column('is_published', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('show_on_homepage', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('seo', sa.JSON(), nullable=False),
        sa.Column('view_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_viewed_at', sa.DateTime(), nullable=True),
        sa.Column('created_by', sa.String(), nullable=False),
        sa.Column('updated_by', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_services_id', 'services', ['id'])
    op.create_index('ix_services_title', 'services', ['title'])
    op.create_index('ix_services_slug', 'services', ['slug'], unique=True)
    op.create_index('ix_services_is_published', 'services', ['is_published'])
    op.create_index('ix_services_show_on_homepage', 'services', ['show_on_homepage'])
    op.create_index('ix_services_display_order', 'services', ['display_order'])
    op.create_index(
        'ix_services_homepage', 'services', ['is_published', 'show_on_homepage', 'display_order']
    )

    # Create banners table
    op.create_table(
        'banners',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('image_url', sa.String(), nullable=False),
        sa.Column('image_public_id', sa.String(), nullable=False),
        sa.Column('link', sa.String(500), nullable=True),
        sa.Column('alt_text', sa.String(200), nullable=False, server_default='Poster'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_by', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_banners_id', 'banners', ['id'])
    op.create_index('ix_banners_is_active', 'banners', ['is_active'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_banners_is_active', table_name='banners')
    op.drop_index('ix_banners_id', table_name='banners')
    op.drop_table('banners')

    op.drop_index('ix_services_homepage', table_name='services')
    op.drop_index('ix_services_display_order', table_name='services')
    op.drop_index('ix_services_show_on_homepage', table_name='services')
    op.drop_index('ix_services_is_published', table_name='services')
    op.drop_index('ix_services_slug', table_name='services')
    op.drop_index('ix_services_title', table_name='services')
    op.drop_index('ix_services_id', table_name='services')
    op.drop_table('services')

    op.drop_index('uq_admins_single_super_admin', table_name='admins')
    op.drop_index('ix_admins_role', table_name='admins')
    op.drop_index('ix_admins_username', table_name='admins')
    op.drop_index('ix_admins_email', table_name='admins')
    op.drop_index('ix_admins_id', table_name='admins')
    op.drop_table('admins')
