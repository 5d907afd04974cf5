"""initial rental schema

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2026-10-19 09:12:44.318204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7d2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def enum(name, *values):
    return sa.Enum(*values, name=name, native_enum=False)


def timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(100)),
        sa.Column("last_name", sa.String(100)),
        sa.Column(
            "role", enum("userrole", "USER", "TENANT", "LANDLORD", "ADMIN"), nullable=False
        ),
        sa.Column("user_type", enum("usertype", "LANDLORD", "TENANT", "ADMIN")),
        sa.Column("phone", sa.String(20)),
        sa.Column("address", sa.String(255)),
        sa.Column("city", sa.String(100)),
        sa.Column("state", sa.String(100)),
        sa.Column("zip_code", sa.String(20)),
        sa.Column("profile_image", sa.String(500)),
        sa.Column("bio", sa.Text()),
        sa.Column("email_verified", sa.Boolean()),
        sa.Column("phone_verified", sa.Boolean()),
        sa.Column("identity_verified", sa.Boolean()),
        sa.Column("company_name", sa.String(255)),
        sa.Column("license_number", sa.String(100)),
        sa.Column("tax_id", sa.String(100)),
        sa.Column("landlord_background_check_passed", sa.Boolean()),
        sa.Column("employment_status", sa.String(100)),
        sa.Column("employer_name", sa.String(255)),
        sa.Column("employer_phone", sa.String(20)),
        sa.Column("monthly_income", sa.Numeric(12, 2)),
        sa.Column("credit_score", sa.Integer()),
        sa.Column("rental_history", sa.Text()),
        sa.Column("tenant_background_check_passed", sa.Boolean()),
        *timestamps(),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "properties",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "landlord_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("address", sa.String(255), nullable=False),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("state", sa.String(100), nullable=False),
        sa.Column("zip_code", sa.String(20), nullable=False),
        sa.Column("rent_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("security_deposit", sa.Numeric(12, 2), nullable=False),
        sa.Column("bedrooms", sa.Integer(), nullable=False),
        sa.Column("bathrooms", sa.Integer(), nullable=False),
        sa.Column("square_footage", sa.Integer()),
        sa.Column("property_type", sa.String(50)),
        sa.Column("furnishing_status", sa.String(50)),
        sa.Column("amenities", sa.JSON()),
        sa.Column("image_urls", sa.JSON()),
        sa.Column("available_date", sa.Date()),
        sa.Column("lease_term_months", sa.Integer()),
        sa.Column("pets_allowed", sa.Boolean()),
        sa.Column("smoking_allowed", sa.Boolean()),
        sa.Column(
            "status",
            enum(
                "propertystatus", "AVAILABLE", "RENTED", "UNDER_MAINTENANCE", "OFF_MARKET"
            ),
            nullable=False,
        ),
        sa.Column("latitude", sa.Float()),
        sa.Column("longitude", sa.Float()),
        *timestamps(),
    )
    op.create_index("ix_properties_landlord_id", "properties", ["landlord_id"])
    op.create_index("ix_properties_city", "properties", ["city"])
    op.create_index("ix_properties_state", "properties", ["state"])
    op.create_index("ix_properties_property_type", "properties", ["property_type"])
    op.create_index("ix_properties_status", "properties", ["status"])

    op.create_table(
        "listings",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "property_id",
            sa.Uuid(),
            sa.ForeignKey("properties.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "landlord_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("rent_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("security_deposit", sa.Numeric(12, 2), nullable=False),
        sa.Column("available_date", sa.Date()),
        sa.Column("lease_term_months", sa.Integer()),
        sa.Column(
            "status",
            enum("listingstatus", "ACTIVE", "INACTIVE", "EXPIRED", "RENTED"),
            nullable=False,
        ),
        sa.Column("type", enum("listingtype", "RENT", "SALE", "SUBLET"), nullable=False),
        sa.Column("expires_at", sa.DateTime()),
        sa.Column("featured_until", sa.DateTime()),
        sa.Column("is_featured", sa.Boolean()),
        sa.Column("view_count", sa.Integer(), nullable=False),
        *timestamps(),
    )
    op.create_index("ix_listings_property_id", "listings", ["property_id"])
    op.create_index("ix_listings_landlord_id", "listings", ["landlord_id"])
    op.create_index("ix_listings_status", "listings", ["status"])
    op.create_index("ix_listings_is_featured", "listings", ["is_featured"])

    op.create_table(
        "applications",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "tenant_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "property_id",
            sa.Uuid(),
            sa.ForeignKey("properties.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "listing_id",
            sa.Uuid(),
            sa.ForeignKey("listings.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "status",
            enum(
                "applicationstatus",
                "PENDING",
                "UNDER_REVIEW",
                "APPROVED",
                "REJECTED",
                "WITHDRAWN",
            ),
            nullable=False,
        ),
        sa.Column("cover_letter", sa.Text()),
        sa.Column("monthly_income", sa.Numeric(12, 2)),
        sa.Column("employment_status", sa.String(100)),
        sa.Column("employer_name", sa.String(255)),
        sa.Column("employer_phone", sa.String(20)),
        sa.Column("rental_history", sa.Text()),
        sa.Column("credit_score", sa.Integer()),
        sa.Column("pets_count", sa.Integer(), nullable=False),
        sa.Column("pet_types", sa.String(255)),
        sa.Column("occupants_count", sa.Integer(), nullable=False),
        sa.Column("move_in_date", sa.Date()),
        sa.Column("lease_term_preference", sa.Integer()),
        sa.Column("reviewed_at", sa.DateTime()),
        sa.Column(
            "reviewed_by", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL")
        ),
        sa.Column("rejection_reason", sa.Text()),
        sa.Column("application_fee", sa.Numeric(12, 2)),
        sa.Column("fee_paid", sa.Boolean(), nullable=False),
        *timestamps(),
    )
    op.create_index("ix_applications_tenant_id", "applications", ["tenant_id"])
    op.create_index("ix_applications_property_id", "applications", ["property_id"])
    op.create_index("ix_applications_listing_id", "applications", ["listing_id"])
    op.create_index("ix_applications_status", "applications", ["status"])
    op.create_index("ix_applications_credit_score", "applications", ["credit_score"])

    op.create_table(
        "agreements",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("agreement_number", sa.String(50), nullable=False),
        sa.Column(
            "tenant_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "landlord_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "property_id",
            sa.Uuid(),
            sa.ForeignKey("properties.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "application_id",
            sa.Uuid(),
            sa.ForeignKey("applications.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column(
            "status",
            enum(
                "agreementstatus",
                "DRAFT",
                "PENDING_SIGNATURE",
                "ACTIVE",
                "EXPIRED",
                "TERMINATED",
                "RENEWED",
            ),
            nullable=False,
        ),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("rent_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("security_deposit", sa.Numeric(12, 2), nullable=False),
        sa.Column("lease_term_months", sa.Integer()),
        sa.Column("payment_due_day", sa.Integer()),
        sa.Column("late_fee", sa.Numeric(12, 2)),
        sa.Column("pet_deposit", sa.Numeric(12, 2)),
        sa.Column("utilities_included", sa.Boolean()),
        sa.Column("utilities_details", sa.Text()),
        sa.Column("maintenance_responsibility", sa.Text()),
        sa.Column("pet_policy", sa.Text()),
        sa.Column("smoking_policy", sa.Text()),
        sa.Column("guest_policy", sa.Text()),
        sa.Column("signed_at", sa.DateTime()),
        sa.Column("signed_by_tenant", sa.Boolean()),
        sa.Column("signed_by_landlord", sa.Boolean()),
        sa.Column("tenant_signature", sa.Text()),
        sa.Column("landlord_signature", sa.Text()),
        sa.Column("effective_date", sa.Date()),
        sa.Column("termination_date", sa.Date()),
        sa.Column("termination_reason", sa.Text()),
        *timestamps(),
    )
    op.create_index(
        "ix_agreements_agreement_number", "agreements", ["agreement_number"], unique=True
    )
    op.create_index("ix_agreements_tenant_id", "agreements", ["tenant_id"])
    op.create_index("ix_agreements_landlord_id", "agreements", ["landlord_id"])
    op.create_index("ix_agreements_property_id", "agreements", ["property_id"])
    op.create_index("ix_agreements_status", "agreements", ["status"])

    op.create_table(
        "payments",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("payment_reference", sa.String(50), nullable=False),
        sa.Column(
            "tenant_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "landlord_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "property_id",
            sa.Uuid(),
            sa.ForeignKey("properties.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "agreement_id",
            sa.Uuid(),
            sa.ForeignKey("agreements.id", ondelete="SET NULL"),
        ),
        sa.Column(
            "type",
            enum(
                "paymenttype",
                "RENT",
                "SECURITY_DEPOSIT",
                "PET_DEPOSIT",
                "LATE_FEE",
                "UTILITY",
                "MAINTENANCE",
                "APPLICATION_FEE",
                "OTHER",
            ),
            nullable=False,
        ),
        sa.Column(
            "status",
            enum(
                "paymentstatus",
                "PENDING",
                "PROCESSING",
                "COMPLETED",
                "FAILED",
                "CANCELLED",
                "REFUNDED",
                "PARTIALLY_REFUNDED",
            ),
            nullable=False,
        ),
        sa.Column(
            "method",
            enum(
                "paymentmethod",
                "CREDIT_CARD",
                "DEBIT_CARD",
                "BANK_TRANSFER",
                "CASH",
                "CHECK",
                "DIGITAL_WALLET",
            ),
        ),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("late_fee", sa.Numeric(12, 2), nullable=False),
        sa.Column("processing_fee", sa.Numeric(12, 2), nullable=False),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("payment_date", sa.DateTime()),
        sa.Column("due_date", sa.DateTime()),
        sa.Column("processed_at", sa.DateTime()),
        sa.Column("transaction_id", sa.String(100)),
        sa.Column("card_last_four", sa.String(4)),
        sa.Column("bank_account_last_four", sa.String(4)),
        sa.Column("payment_description", sa.Text()),
        sa.Column("failure_reason", sa.Text()),
        sa.Column("retry_count", sa.Integer(), nullable=False),
        sa.Column("next_retry_at", sa.DateTime()),
        sa.Column("version", sa.Integer(), nullable=False),
        *timestamps(),
    )
    op.create_index(
        "ix_payments_payment_reference", "payments", ["payment_reference"], unique=True
    )
    op.create_index("ix_payments_tenant_id", "payments", ["tenant_id"])
    op.create_index("ix_payments_landlord_id", "payments", ["landlord_id"])
    op.create_index("ix_payments_property_id", "payments", ["property_id"])
    op.create_index("ix_payments_agreement_id", "payments", ["agreement_id"])
    op.create_index("ix_payments_type", "payments", ["type"])
    op.create_index("ix_payments_status", "payments", ["status"])
    op.create_index("ix_payments_due_date", "payments", ["due_date"])
    op.create_index("ix_payments_transaction_id", "payments", ["transaction_id"])


def downgrade():
    op.drop_table("payments")
    op.drop_table("agreements")
    op.drop_table("applications")
    op.drop_table("listings")
    op.drop_table("properties")
    op.drop_table("users")
