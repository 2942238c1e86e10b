"""inventario_inicial

Revision ID: inventario_inicial
Revises:
Create Date: 2026-10-01 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'inventario_inicial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Verificar si las tablas ya existen (init_db pudo crearlas al arrancar)
    conn = op.get_bind()
    inspector = sa.inspect(conn)
    existing_tables = inspector.get_table_names()

    if 'locations' not in existing_tables:
        op.create_table(
            'locations',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=200), nullable=False),
            sa.Column('address', sa.String(length=300), nullable=True),
            sa.Column('manager', sa.String(length=200), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id', name='pk_locations'),
        )
        op.create_index('ix_locations_name', 'locations', ['name'], unique=True)

    if 'categories' not in existing_tables:
        op.create_table(
            'categories',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=200), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id', name='pk_categories'),
        )
        op.create_index('ix_categories_name', 'categories', ['name'], unique=True)

    if 'suppliers' not in existing_tables:
        op.create_table(
            'suppliers',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=200), nullable=False),
            sa.Column('contact_name', sa.String(length=200), nullable=True),
            sa.Column('email', sa.String(length=200), nullable=True),
            sa.Column('phone', sa.String(length=50), nullable=True),
            sa.Column('address', sa.String(length=300), nullable=True),
            sa.Column('notes', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id', name='pk_suppliers'),
        )
        op.create_index('ix_suppliers_name', 'suppliers', ['name'])

    if 'users' not in existing_tables:
        op.create_table(
            'users',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=200), nullable=False),
            sa.Column('email', sa.String(length=200), nullable=False),
            sa.Column('location', sa.String(length=200), nullable=False),
            sa.Column('role', sa.String(length=50), nullable=False, server_default='colaborador'),
            sa.Column('receive_alerts', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id', name='pk_users'),
        )
        op.create_index('ix_users_email', 'users', ['email'], unique=True)
        op.create_index('ix_users_location', 'users', ['location'])

    if 'inventory' not in existing_tables:
        op.create_table(
            'inventory',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=200), nullable=False),
            sa.Column('category', sa.String(length=200), nullable=False),
            sa.Column('location', sa.String(length=200), nullable=False),
            sa.Column('quantity', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('min_stock', sa.Integer(), nullable=True, server_default='0'),
            sa.Column('cost', sa.Numeric(precision=14, scale=2), nullable=False, server_default='0'),
            sa.Column('asset_type', sa.String(length=20), nullable=False, server_default='Insumo'),
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('lead_time', sa.Integer(), nullable=True),
            sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id', name='pk_inventory'),
            sa.UniqueConstraint('name', 'category', 'location', name='uq_inventory_name_category_location'),
            sa.CheckConstraint('quantity >= 0', name='ck_inventory_quantity_non_negative'),
        )
        op.create_index('ix_inventory_name', 'inventory', ['name'])
        op.create_index('ix_inventory_category', 'inventory', ['category'])
        op.create_index('ix_inventory_location', 'inventory', ['location'])

    if 'transactions' not in existing_tables:
        op.create_table(
            'transactions',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('item', sa.String(length=200), nullable=False),
            sa.Column('category', sa.String(length=200), nullable=False),
            sa.Column('location', sa.String(length=200), nullable=False),
            sa.Column('type', sa.String(length=20), nullable=False),
            sa.Column('quantity', sa.Integer(), nullable=False),
            sa.Column('date', sa.Date(), nullable=False),
            sa.Column('user_id', sa.String(length=100), nullable=False, server_default='system'),
            sa.Column('user_name', sa.String(length=200), nullable=False),
            sa.Column('notes', sa.Text(), nullable=True),
            sa.Column('has_proof', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('proof_url', sa.String(length=500), nullable=True),
            sa.Column('voucher_number', sa.String(length=100), nullable=True),
            sa.Column('receipt_id', sa.Integer(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id', name='pk_transactions'),
            sa.CheckConstraint('quantity > 0', name='ck_transactions_quantity_positive'),
        )
        op.create_index('ix_transactions_item', 'transactions', ['item'])
        op.create_index('ix_transactions_location', 'transactions', ['location'])
        op.create_index('ix_transactions_type', 'transactions', ['type'])
        op.create_index('ix_transactions_date', 'transactions', ['date'])
        op.create_index('ix_transactions_receipt_id', 'transactions', ['receipt_id'])

    if 'part_receipts' not in existing_tables:
        op.create_table(
            'part_receipts',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('item_id', sa.Integer(), nullable=True),
            sa.Column('supplier_id', sa.Integer(), nullable=False),
            sa.Column('invoice_number', sa.String(length=100), nullable=False),
            sa.Column('receipt_date', sa.Date(), nullable=False),
            sa.Column('quantity', sa.Integer(), nullable=False),
            sa.Column('cost', sa.Numeric(precision=14, scale=2), nullable=True),
            sa.Column('notes', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(['item_id'], ['inventory.id'], ondelete='SET NULL', name='fk_part_receipts_item_id'),
            sa.ForeignKeyConstraint(['supplier_id'], ['suppliers.id'], name='fk_part_receipts_supplier_id'),
            sa.PrimaryKeyConstraint('id', name='pk_part_receipts'),
        )
        op.create_index('ix_part_receipts_item_id', 'part_receipts', ['item_id'])
        op.create_index('ix_part_receipts_supplier_id', 'part_receipts', ['supplier_id'])

    if 'asset_assignments' not in existing_tables:
        op.create_table(
            'asset_assignments',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('inventory_id', sa.Integer(), nullable=False),
            sa.Column('assigned_to', sa.String(length=200), nullable=False),
            sa.Column('assigned_date', sa.Date(), nullable=False),
            sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column('notes', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(['inventory_id'], ['inventory.id'], ondelete='CASCADE', name='fk_asset_assignments_inventory_id'),
            sa.PrimaryKeyConstraint('id', name='pk_asset_assignments'),
        )
        op.create_index('ix_asset_assignments_inventory_id', 'asset_assignments', ['inventory_id'])
        op.create_index('ix_asset_assignments_is_active', 'asset_assignments', ['is_active'])

    if 'audits' not in existing_tables:
        op.create_table(
            'audits',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('location', sa.String(length=200), nullable=False),
            sa.Column('date', sa.Date(), nullable=False),
            sa.Column('user_name', sa.String(length=200), nullable=False),
            sa.Column('items_count', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('discrepancies', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id', name='pk_audits'),
        )
        op.create_index('ix_audits_location', 'audits', ['location'])
        op.create_index('ix_audits_created_at', 'audits', ['created_at'])

    if 'audit_items' not in existing_tables:
        op.create_table(
            'audit_items',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('audit_id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=200), nullable=False),
            sa.Column('category', sa.String(length=200), nullable=False),
            sa.Column('location', sa.String(length=200), nullable=False),
            sa.Column('system_quantity', sa.Integer(), nullable=False),
            sa.Column('actual_quantity', sa.Integer(), nullable=False),
            sa.Column('difference', sa.Integer(), nullable=False),
            sa.Column('cost', sa.Numeric(precision=14, scale=2), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(['audit_id'], ['audits.id'], name='fk_audit_items_audit_id'),
            sa.PrimaryKeyConstraint('id', name='pk_audit_items'),
        )
        op.create_index('ix_audit_items_audit_id', 'audit_items', ['audit_id'])

    if 'operation_log' not in existing_tables:
        op.create_table(
            'operation_log',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('operation', sa.String(length=50), nullable=False),
            sa.Column('entity_type', sa.String(length=50), nullable=False),
            sa.Column('entity_id', sa.Integer(), nullable=True),
            sa.Column('status', sa.String(length=20), nullable=False),
            sa.Column('last_step', sa.String(length=100), nullable=True),
            sa.Column('failed_step', sa.String(length=100), nullable=True),
            sa.Column('context', sa.JSON(), nullable=True),
            sa.Column('error', sa.Text(), nullable=True),
            sa.Column('user_name', sa.String(length=200), nullable=True),
            sa.Column('started_at', sa.DateTime(), nullable=True),
            sa.Column('finished_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id', name='pk_operation_log'),
        )
        op.create_index('ix_operation_log_operation', 'operation_log', ['operation'])
        op.create_index('ix_operation_log_entity_id', 'operation_log', ['entity_id'])
        op.create_index('ix_operation_log_status', 'operation_log', ['status'])


def downgrade() -> None:
    for table in (
        'operation_log', 'audit_items', 'audits', 'asset_assignments', 'part_receipts',
        'transactions', 'inventory', 'users', 'suppliers', 'categories', 'locations',
    ):
        op.drop_table(table)
