"""initial family schema

Revision ID: 20261018_0001
Revises: 
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '20261018_0001'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table('users',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('email', sa.String(), nullable=False, unique=True),
        sa.Column('hashed_password', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False)
    )
    op.create_table('family_members',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('first_name', sa.String(), nullable=False, server_default=''),
        sa.Column('last_name', sa.String(), nullable=False, server_default=''),
        sa.Column('middle_name', sa.String(), nullable=False, server_default=''),
        sa.Column('nick_name', sa.String(), nullable=False, server_default=''),
        sa.Column('email', sa.String(), nullable=False, server_default=''),
        sa.Column('username', sa.String(), nullable=False, server_default=''),
        sa.Column('bio', sa.String(), nullable=False, server_default=''),
        sa.Column('phone_number', sa.String(), nullable=False, server_default=''),
        sa.Column('birthday', sa.String(), nullable=False, server_default=''),
        sa.Column('birth_city', sa.String(), nullable=False, server_default=''),
        sa.Column('birth_state', sa.String(), nullable=False, server_default=''),
        sa.Column('current_city', sa.String(), nullable=False, server_default=''),
        sa.Column('current_state', sa.String(), nullable=False, server_default=''),
        sa.Column('profile_photo', sa.String(), nullable=False, server_default=''),
        sa.Column('death_date', sa.String(), nullable=False, server_default=''),
        sa.Column('use_first_name', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('use_middle_name', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('use_nick_name', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('show_zodiac', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('family_group', sa.String(), nullable=False, server_default='real', index=True),
        sa.Column('social_media', sa.JSON(), nullable=True),
        sa.Column('hobbies', sa.JSON(), nullable=True),
        sa.Column('languages', sa.JSON(), nullable=True),
        sa.Column('pets', sa.JSON(), nullable=True),
        sa.Column('disabled_notification_types', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False)
    )
    op.create_table('relationships',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('person_a_id', sa.String(), sa.ForeignKey('family_members.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('person_b_id', sa.String(), sa.ForeignKey('family_members.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('relationship_type', sa.String(), nullable=False, index=True),
        sa.Column('relationship_subtype', sa.String(), nullable=False, server_default=''),
        sa.Column('start_date', sa.String(), nullable=False, server_default=''),
        sa.Column('end_date', sa.String(), nullable=False, server_default=''),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('notes', sa.String(), nullable=False, server_default=''),
        sa.Column('created_by', sa.String(), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(), nullable=False)
    )
    op.create_table('events',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), nullable=True, index=True),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('family_group', sa.String(), nullable=False, server_default='real', index=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('location', sa.String(), nullable=True),
        sa.Column('start_at', sa.DateTime(), nullable=False, index=True),
        sa.Column('end_at', sa.DateTime(), nullable=True),
        sa.Column('all_day', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('background_color', sa.String(), nullable=True),
        sa.Column('border_color', sa.String(), nullable=True),
        sa.Column('text_color', sa.String(), nullable=True),
        sa.Column('category', sa.String(), nullable=True, index=True),
        sa.Column('rrule', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False)
    )
    op.create_table('event_rsvps',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('event_id', sa.String(), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('user_id', sa.String(), nullable=False, index=True),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('event_id', 'user_id', name='uq_event_rsvps_event_user')
    )
    op.create_table('notifications',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), nullable=False, index=True),
        sa.Column('type', sa.String(), nullable=False, index=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('message', sa.String(), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false(), index=True),
        sa.Column('related_id', sa.String(), nullable=True, index=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False)
    )


def downgrade():
    op.drop_table('notifications')
    op.drop_table('event_rsvps')
    op.drop_table('events')
    op.drop_table('relationships')
    op.drop_table('family_members')
    op.drop_table('users')
