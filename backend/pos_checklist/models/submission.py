import uuid

from sqlalchemy import Column, String, Text, Boolean, DateTime, JSON, Index
from pos_checklist.database import Base
from pos_checklist.models.user import _utcnow

KIND_CONFIGURATION = "configuration"
KIND_FORM = "form"
KINDS = (KIND_CONFIGURATION, KIND_FORM)

TASK_FLAGS = (
    "sa_pass_change",
    "synced_user_pass_change",
    "non_sa_pass_change",
    "windows_auth_disable",
    "sql_custom_port",
    "firewall_on_all_pcs",
    "anydesk_uninstall",
    "ultraviewer_pass_and_id",
    "pos_admin_pass_change",
)


class Submission(Base):
    """A POS configuration checklist filed by one user.

    Configuration and form submissions share this table and differ only in
    ``kind`` and in how many non-SA credentials they carry.
    """
    __tablename__ = "submissions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    kind = Column(String(20), nullable=False)  # "configuration" | "form"
    owner_user_id = Column(String(36), nullable=False, index=True)
    owner_username = Column(String(100), nullable=False)

    restaurant_name = Column(String(200), nullable=False)
    outlet_name = Column(String(200), nullable=False)
    sa_password = Column(String(200), nullable=False)
    non_sa_credentials = Column(JSON, nullable=False, default=list)  # [{"username", "password"}]

    anydesk_username = Column(String(200), default="")
    anydesk_password = Column(String(200), default="")
    ultraviewer_username = Column(String(200), default="")
    ultraviewer_password = Column(String(200), default="")

    sa_pass_change = Column(Boolean, nullable=False, default=False)
    synced_user_pass_change = Column(Boolean, nullable=False, default=False)
    non_sa_pass_change = Column(Boolean, nullable=False, default=False)
    windows_auth_disable = Column(Boolean, nullable=False, default=False)
    sql_custom_port = Column(Boolean, nullable=False, default=False)
    firewall_on_all_pcs = Column(Boolean, nullable=False, default=False)
    anydesk_uninstall = Column(Boolean, nullable=False, default=False)
    ultraviewer_pass_and_id = Column(Boolean, nullable=False, default=False)
    pos_admin_pass_change = Column(Boolean, nullable=False, default=False)

    remarks = Column(Text, default="")
    user_agent = Column(Text, default="")
    ip_address = Column(String(100), default="")

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (
        Index("ix_submissions_owner_kind_created", "owner_user_id", "kind", "created_at"),
        Index("ix_submissions_restaurant_outlet", "restaurant_name", "outlet_name"),
    )
