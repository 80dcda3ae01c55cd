"""Create billbook schema.

Revision ID: create_billbook_schema
Revises:
Create Date: 2026-10-18

Tables:
- company_profile (single row, numbering prefixes)
- customers (derived outstanding_balance)
- invoices / invoice_items (CGST+SGST or IGST split)
- dyeing_bills / dyeing_bill_items
- payments
- document_sequences (one locked counter per document class and prefix)

Money columns are NUMERIC(14, 2); status-like columns are UPPERCASE VARCHAR.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'create_billbook_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


MONEY = sa.Numeric(14, 2)
RATE = sa.Numeric(6, 3)
QUANTITY = sa.Numeric(12, 3)


def _timestamps(with_updated: bool = True):
    columns = [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]
    if with_updated:
        columns.append(
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())
        )
    return columns


def upgrade() -> None:
    op.create_table(
        'company_profile',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('company_name', sa.String(200), nullable=False),
        sa.Column('address', sa.Text, nullable=True),
        sa.Column('gstin', sa.String(15), nullable=True),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('invoice_prefix', sa.String(20), nullable=False, server_default='INV'),
        sa.Column('dyeing_prefix', sa.String(20), nullable=False, server_default='DYE'),
        *_timestamps(),
    )

    op.create_table(
        'customers',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('gstin', sa.String(15), nullable=True),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('address', sa.Text, nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('state', sa.String(100), nullable=True),
        sa.Column('pincode', sa.String(10), nullable=True),
        sa.Column('outstanding_balance', MONEY, nullable=False, server_default='0'),
        *_timestamps(),
    )
    op.create_index('ix_customers_name', 'customers', ['name'])
    op.create_index('ix_customers_gstin', 'customers', ['gstin'])
    op.create_index('ix_customers_phone', 'customers', ['phone'])

    op.create_table(
        'invoices',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('invoice_number', sa.String(50), nullable=False),
        sa.Column('customer_id', sa.Uuid(), sa.ForeignKey('customers.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('invoice_date', sa.Date, nullable=False),
        sa.Column('subtotal', MONEY, nullable=False, server_default='0'),
        sa.Column('tax_mode', sa.String(20), nullable=False),
        sa.Column('tax_rate', RATE, nullable=False, server_default='0'),
        sa.Column('cgst_rate', RATE, nullable=True),
        sa.Column('sgst_rate', RATE, nullable=True),
        sa.Column('igst_rate', RATE, nullable=True),
        sa.Column('cgst_amount', MONEY, nullable=True),
        sa.Column('sgst_amount', MONEY, nullable=True),
        sa.Column('igst_amount', MONEY, nullable=True),
        sa.Column('tax_amount', MONEY, nullable=False, server_default='0'),
        sa.Column('total_amount', MONEY, nullable=False, server_default='0'),
        sa.Column('paid_amount', MONEY, nullable=False, server_default='0'),
        sa.Column('status', sa.String(20), nullable=False, server_default='PENDING'),
        sa.Column('notes', sa.Text, nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_invoices_invoice_number', 'invoices', ['invoice_number'], unique=True)
    op.create_index('ix_invoices_customer_id', 'invoices', ['customer_id'])
    op.create_index('ix_invoices_created_at', 'invoices', ['created_at'])

    op.create_table(
        'invoice_items',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('invoice_id', sa.Uuid(), sa.ForeignKey('invoices.id', ondelete='CASCADE'), nullable=False),
        sa.Column('line_number', sa.Integer, nullable=False, server_default='1'),
        sa.Column('item_name', sa.String(300), nullable=False),
        sa.Column('hsn_code', sa.String(8), nullable=False),
        sa.Column('quantity', QUANTITY, nullable=False),
        sa.Column('rate', MONEY, nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        *_timestamps(with_updated=False),
    )
    op.create_index('ix_invoice_items_invoice_id', 'invoice_items', ['invoice_id'])

    op.create_table(
        'dyeing_bills',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('bill_number', sa.String(50), nullable=False),
        sa.Column('customer_id', sa.Uuid(), sa.ForeignKey('customers.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('bill_date', sa.Date, nullable=False),
        sa.Column('total_amount', MONEY, nullable=False, server_default='0'),
        sa.Column('paid_amount', MONEY, nullable=False, server_default='0'),
        sa.Column('status', sa.String(20), nullable=False, server_default='PENDING'),
        sa.Column('notes', sa.Text, nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_dyeing_bills_bill_number', 'dyeing_bills', ['bill_number'], unique=True)
    op.create_index('ix_dyeing_bills_customer_id', 'dyeing_bills', ['customer_id'])
    op.create_index('ix_dyeing_bills_created_at', 'dyeing_bills', ['created_at'])

    op.create_table(
        'dyeing_bill_items',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('bill_id', sa.Uuid(), sa.ForeignKey('dyeing_bills.id', ondelete='CASCADE'), nullable=False),
        sa.Column('line_number', sa.Integer, nullable=False, server_default='1'),
        sa.Column('product_name', sa.String(300), nullable=False),
        sa.Column('quantity', QUANTITY, nullable=False),
        sa.Column('rate', MONEY, nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        *_timestamps(with_updated=False),
    )
    op.create_index('ix_dyeing_bill_items_bill_id', 'dyeing_bill_items', ['bill_id'])

    op.create_table(
        'payments',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('customer_id', sa.Uuid(), sa.ForeignKey('customers.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('invoice_id', sa.Uuid(), sa.ForeignKey('invoices.id', ondelete='SET NULL'), nullable=True),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('payment_date', sa.Date, nullable=False),
        sa.Column('payment_method', sa.String(20), nullable=False, server_default='CASH'),
        sa.Column('notes', sa.Text, nullable=True),
        *_timestamps(with_updated=False),
    )
    op.create_index('ix_payments_customer_id', 'payments', ['customer_id'])
    op.create_index('ix_payments_invoice_id', 'payments', ['invoice_id'])

    op.create_table(
        'document_sequences',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('document_class', sa.String(20), nullable=False),
        sa.Column('prefix', sa.String(20), nullable=False),
        sa.Column('current_number', sa.Integer, nullable=False, server_default='0'),
        sa.Column('padding_length', sa.Integer, nullable=False, server_default='5'),
        *_timestamps(),
        sa.UniqueConstraint('document_class', 'prefix', name='uq_document_class_prefix'),
    )
    op.create_index('ix_document_sequences_document_class', 'document_sequences', ['document_class'])


def downgrade() -> None:
    op.drop_index('ix_document_sequences_document_class', table_name='document_sequences')
    op.drop_table('document_sequences')
    op.drop_index('ix_payments_invoice_id', table_name='payments')
    op.drop_index('ix_payments_customer_id', table_name='payments')
    op.drop_table('payments')
    op.drop_index('ix_dyeing_bill_items_bill_id', table_name='dyeing_bill_items')
    op.drop_table('dyeing_bill_items')
    op.drop_index('ix_dyeing_bills_created_at', table_name='dyeing_bills')
    op.drop_index('ix_dyeing_bills_customer_id', table_name='dyeing_bills')
    op.drop_index('ix_dyeing_bills_bill_number', table_name='dyeing_bills')
    op.drop_table('dyeing_bills')
    op.drop_index('ix_invoice_items_invoice_id', table_name='invoice_items')
    op.drop_table('invoice_items')
    op.drop_index('ix_invoices_created_at', table_name='invoices')
    op.drop_index('ix_invoices_customer_id', table_name='invoices')
    op.drop_index('ix_invoices_invoice_number', table_name='invoices')
    op.drop_table('invoices')
    op.drop_index('ix_customers_phone', table_name='customers')
    op.drop_index('ix_customers_gstin', table_name='customers')
    op.drop_index('ix_customers_name', table_name='customers')
    op.drop_table('customers')
    op.drop_table('company_profile')
