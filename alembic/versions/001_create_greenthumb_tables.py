"""Create GreenThumb tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  accounts, bans, plants, photos, photo_votes and photo_reports.
How:   Portable column types; every timestamp is TIMESTAMP WITH TIME ZONE.

Rollback: downgrade() drops all six tables (destructive).
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "accounts",
        # Ids are issued by the identity provider, never generated here
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False,
                  comment="Client-supplied user identifier"),
        sa.Column("role", sa.String(length=16), server_default=sa.text("'user'"),
                  nullable=False, comment="Role tag: user, admin"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False,
                  comment="When this account was registered (UTC)"),
        sa.PrimaryKeyConstraint("id", name="pk_accounts"),
    )

    op.create_table(
        "bans",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False, comment="The banned account"),
        sa.Column("admin_id", sa.Integer(), nullable=True,
                  comment="The admin who issued the ban (NULL once that admin is removed)"),
        sa.Column("expiration_date", sa.DateTime(timezone=True), nullable=True,
                  comment="When the ban lapses; NULL means permanent"),
        sa.PrimaryKeyConstraint("id", name="pk_bans"),
        sa.ForeignKeyConstraint(["user_id"], ["accounts.id"], name="fk_bans_user_id"),
        sa.ForeignKeyConstraint(["admin_id"], ["accounts.id"], name="fk_bans_admin_id",
                                ondelete="SET NULL"),
    )
    op.create_index("idx_bans_user_id", "bans", ["user_id"])

    op.create_table(
        "plants",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False,
                  comment="Display name, set at creation"),
        sa.Column("bio", sa.Text(), nullable=False,
                  comment="Free-text description, editable by admins"),
        sa.PrimaryKeyConstraint("id", name="pk_plants"),
    )
    op.create_index("idx_plants_name", "plants", ["name"])

    op.create_table(
        "photos",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("plant_id", sa.Integer(), nullable=False, comment="Plant shown in the photo"),
        sa.Column("user_id", sa.Integer(), nullable=False, comment="Uploader"),
        sa.Column("image", sa.Text(), nullable=False,
                  comment="Image reference or encoded payload, stored verbatim"),
        sa.Column("upload_date", sa.DateTime(timezone=True), nullable=False,
                  comment="When the photo was uploaded (UTC)"),
        sa.PrimaryKeyConstraint("id", name="pk_photos"),
        sa.ForeignKeyConstraint(["plant_id"], ["plants.id"], name="fk_photos_plant_id"),
        sa.ForeignKeyConstraint(["user_id"], ["accounts.id"], name="fk_photos_user_id"),
    )
    op.create_index("idx_photos_upload_date", "photos", [sa.text("upload_date DESC")])
    op.create_index("idx_photos_plant_id", "photos", ["plant_id"])
    op.create_index("idx_photos_user_id", "photos", ["user_id"])

    op.create_table(
        "photo_votes",
        sa.Column("photo_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("value", sa.SmallInteger(), nullable=False),
        sa.PrimaryKeyConstraint("photo_id", "user_id", name="pk_photo_votes"),
        sa.ForeignKeyConstraint(["photo_id"], ["photos.id"], name="fk_photo_votes_photo_id",
                                ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["accounts.id"], name="fk_photo_votes_user_id",
                                ondelete="CASCADE"),
        sa.CheckConstraint("value IN (-1, 1)", name="ck_photo_votes_value"),
    )

    op.create_table(
        "photo_reports",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        # Plain integer: handled reports outlive the photo they describe
        sa.Column("photo_id", sa.Integer(), nullable=False, comment="Reported photo"),
        sa.Column("user_id", sa.Integer(), nullable=False, comment="Reporting account"),
        sa.Column("report_text", sa.Text(), nullable=False),
        sa.Column("report_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("admin_action", sa.SmallInteger(), nullable=True,
                  comment="0 dismiss, 1 remove photo, 2 remove photo and ban; NULL while unhandled"),
        sa.Column("admin_id", sa.Integer(), nullable=True),
        sa.Column("handle_date", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_photo_reports"),
        sa.ForeignKeyConstraint(["user_id"], ["accounts.id"], name="fk_photo_reports_user_id"),
        sa.ForeignKeyConstraint(["admin_id"], ["accounts.id"], name="fk_photo_reports_admin_id",
                                ondelete="SET NULL"),
    )
    op.create_index("idx_photo_reports_report_date", "photo_reports", ["report_date"])
    op.create_index("idx_photo_reports_admin_id", "photo_reports", ["admin_id"])


def downgrade() -> None:
    op.drop_index("idx_photo_reports_admin_id", table_name="photo_reports")
    op.drop_index("idx_photo_reports_report_date", table_name="photo_reports")
    op.drop_table("photo_reports")
    op.drop_table("photo_votes")
    op.drop_index("idx_photos_user_id", table_name="photos")
    op.drop_index("idx_photos_plant_id", table_name="photos")
    op.drop_index("idx_photos_upload_date", table_name="photos")
    op.drop_table("photos")
    op.drop_index("idx_plants_name", table_name="plants")
    op.drop_table("plants")
    op.drop_index("idx_bans_user_id", table_name="bans")
    op.drop_table("bans")
    op.drop_table("accounts")
