"""Create seller_profile and seller_kyc tables

Revision ID: 001
Revises:
Create Date: 2025-01-06 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')

    # Reusable updated_at trigger function
    op.execute("""
        CREATE OR REPLACE FUNCTION update_updated_at_column()
        RETURNS TRIGGER AS $$
        BEGIN
          NEW.updated_at = NOW();
          RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)

    # Seller profile (created at signup; KYC only writes the flags)
    op.create_table(
        'seller_profile',
        sa.Column('id', sa.Text(), nullable=False),
        sa.Column('email', sa.Text(), nullable=True),
        sa.Column('is_verified', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('approved', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    # One KYC record per seller
    op.create_table(
        'seller_kyc',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('seller_id', sa.Text(), nullable=False),
        sa.Column('email', sa.Text(), server_default='', nullable=False),
        sa.Column('phone', sa.Text(), nullable=True),
        sa.Column('full_name', sa.Text(), nullable=True),
        sa.Column('country', sa.Text(), nullable=True),
        sa.Column('pan', sa.Text(), nullable=True),
        sa.Column('gstin', sa.Text(), nullable=True),
        sa.Column('id_type', sa.Text(), nullable=True),
        sa.Column('id_number', sa.Text(), nullable=True),
        sa.Column('id_document_url', sa.Text(), nullable=True),
        sa.Column('business_address', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('address_proof_url', sa.Text(), nullable=True),
        sa.Column('bank_holder_name', sa.Text(), nullable=True),
        sa.Column('account_number', sa.Text(), nullable=True),
        sa.Column('account_type', sa.Text(), nullable=True),
        sa.Column('ifsc_code', sa.Text(), nullable=True),
        sa.Column('bank_statement_url', sa.Text(), nullable=True),
        sa.Column('pep_declaration', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('sanctions_check', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('aml_compliance', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('tax_compliance', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('terms_accepted', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('kyc_status', sa.Text(), server_default='draft', nullable=False),
        sa.Column('kyc_tier', sa.Integer(), server_default=sa.text('2'), nullable=False),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('verified_by_admin', sa.Text(), nullable=True),
        sa.Column('verified_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('submitted_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint(
            "kyc_status IN ('draft', 'pending', 'approved', 'rejected')",
            name='ck_seller_kyc_status'
        ),
        sa.CheckConstraint("kyc_tier IN (1, 2, 3)", name='ck_seller_kyc_tier')
    )

    # Conflict target of the submission upsert
    op.create_index('ix_seller_kyc_seller_id', 'seller_kyc', ['seller_id'], unique=True)

    # Admin listing order
    op.create_index(
        'idx_seller_kyc_submitted_at',
        'seller_kyc',
        [sa.text('submitted_at DESC NULLS LAST')]
    )

    for table in ('seller_profile', 'seller_kyc'):
        op.execute(f"""
            CREATE TRIGGER update_{table}_updated_at
            BEFORE UPDATE ON {table}
            FOR EACH ROW
            EXECUTE FUNCTION update_updated_at_column();
        """)


def downgrade():
    op.execute('DROP TRIGGER IF EXISTS update_seller_kyc_updated_at ON seller_kyc')
    op.execute('DROP TRIGGER IF EXISTS update_seller_profile_updated_at ON seller_profile')

    op.drop_index('idx_seller_kyc_submitted_at', table_name='seller_kyc')
    op.drop_index('ix_seller_kyc_seller_id', table_name='seller_kyc')

    op.drop_table('seller_kyc')
    op.drop_table('seller_profile')
