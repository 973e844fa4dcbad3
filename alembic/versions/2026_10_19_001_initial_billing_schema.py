"""Initial billing schema: users, teams, plans, subscriptions, orders, activations

Revision ID: 001_initial_billing_schema
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '001_initial_billing_schema'
down_revision = None


def _restrict_fk(target):
    return sa.ForeignKey(target, ondelete='RESTRICT', onupdate='RESTRICT')


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=True),
        sa.Column('email_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('locale', sa.String(16), nullable=False, server_default='en'),
        sa.Column('timezone', sa.String(64), nullable=True),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.current_timestamp()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.current_timestamp()),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'teams',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('is_personal', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('user_id', sa.Integer(), _restrict_fk('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.current_timestamp()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.current_timestamp()),
    )
    op.create_index('ix_teams_user_id', 'teams', ['user_id'])

    # At most one personal team per user
    op.create_index(
        'uq_teams_personal_owner',
        'teams',
        ['user_id'],
        unique=True,
        sqlite_where=sa.text('is_personal = 1'),
        postgresql_where=sa.text('is_personal'),
    )

    op.create_table(
        'plans',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.CheckConstraint('price >= 0', name='ck_plans_price_non_negative'),
    )

    op.create_table(
        'subscriptions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('team_id', sa.Integer(), _restrict_fk('teams.id'), nullable=False),
        sa.Column('plan_id', sa.Integer(), _restrict_fk('plans.id'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.current_timestamp()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.current_timestamp()),
    )
    op.create_index('ix_subscriptions_team_id', 'subscriptions', ['team_id'])
    op.create_index('ix_subscriptions_plan_id', 'subscriptions', ['plan_id'])

    # At most one active subscription per team
    op.create_index(
        'uq_subscriptions_active_team',
        'subscriptions',
        ['team_id'],
        unique=True,
        sqlite_where=sa.text('is_active = 1'),
        postgresql_where=sa.text('is_active'),
    )

    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('subscription_id', sa.Integer(), _restrict_fk('subscriptions.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.current_timestamp()),
        sa.Column('paid', sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index('ix_orders_subscription_id', 'orders', ['subscription_id'])

    op.create_table(
        'subscription_activations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('subscription_id', sa.Integer(), _restrict_fk('subscriptions.id'), nullable=False),
        sa.Column('activation_date', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.current_timestamp()),
    )
    op.create_index('ix_subscription_activations_subscription_id', 'subscription_activations', ['subscription_id'])


def downgrade():
    op.drop_index('ix_subscription_activations_subscription_id', 'subscription_activations')
    op.drop_table('subscription_activations')

    op.drop_index('ix_orders_subscription_id', 'orders')
    op.drop_table('orders')

    op.drop_index('uq_subscriptions_active_team', 'subscriptions')
    op.drop_index('ix_subscriptions_plan_id', 'subscriptions')
    op.drop_index('ix_subscriptions_team_id', 'subscriptions')
    op.drop_table('subscriptions')

    op.drop_table('plans')

    op.drop_index('uq_teams_personal_owner', 'teams')
    op.drop_index('ix_teams_user_id', 'teams')
    op.drop_table('teams')

    op.drop_index('ix_users_email', 'users')
    op.drop_table('users')
