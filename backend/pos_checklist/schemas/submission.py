from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from datetime import datetime, timezone
from typing import Optional


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; stored values are always UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class CamelModel(BaseModel):
    """Base for bodies exchanged in the camelCase wire format."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Credential(CamelModel):
    username: str
    password: str


class CredentialIn(CamelModel):
    username: Optional[str] = None
    password: Optional[str] = None


class SubmissionPayload(CamelModel):
    """Inbound checklist body shared by both submission kinds.

    Presence and blankness of required values are checked by the submission
    service so that errors name the offending field.
    """
    restaurant_name: Optional[str] = None
    outlet_name: Optional[str] = None
    sa_password: Optional[str] = None

    # configuration kind: exactly one non-SA account
    non_sa_username: Optional[str] = None
    non_sa_password: Optional[str] = None
    # form kind: one or more non-SA accounts
    non_sa_credentials: Optional[list[CredentialIn]] = None

    anydesk_username: Optional[str] = None
    anydesk_password: Optional[str] = None
    ultraviewer_username: Optional[str] = None
    ultraviewer_password: Optional[str] = None

    sa_pass_change: bool = False
    synced_user_pass_change: bool = False
    non_sa_pass_change: bool = False
    windows_auth_disable: bool = False
    sql_custom_port: bool = False
    firewall_on_all_pcs: bool = False
    anydesk_uninstall: bool = False
    ultraviewer_pass_and_id: bool = False
    pos_admin_pass_change: bool = False

    remarks: Optional[str] = None
    user_agent: Optional[str] = None


class SubmissionSummary(CamelModel):
    id: str
    restaurant_name: str
    outlet_name: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_submission(cls, sub) -> "SubmissionSummary":
        return cls(
            id=sub.id,
            restaurant_name=sub.restaurant_name,
            outlet_name=sub.outlet_name,
            created_at=as_utc(sub.created_at),
        )


class ConfigurationCreatedResponse(BaseModel):
    message: str
    configuration: SubmissionSummary


class FormCreatedResponse(BaseModel):
    message: str
    form: SubmissionSummary


class SubmissionRecordBase(CamelModel):
    id: str
    user_id: str
    username: str
    restaurant_name: str
    outlet_name: str
    sa_password: str
    anydesk_username: str = ""
    anydesk_password: str = ""
    ultraviewer_username: str = ""
    ultraviewer_password: str = ""
    sa_pass_change: bool = False
    synced_user_pass_change: bool = False
    non_sa_pass_change: bool = False
    windows_auth_disable: bool = False
    sql_custom_port: bool = False
    firewall_on_all_pcs: bool = False
    anydesk_uninstall: bool = False
    ultraviewer_pass_and_id: bool = False
    pos_admin_pass_change: bool = False
    remarks: str = ""
    user_agent: str = ""
    ip_address: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @staticmethod
    def _common_fields(sub) -> dict:
        return {
            "id": sub.id,
            "user_id": sub.owner_user_id,
            "username": sub.owner_username,
            "restaurant_name": sub.restaurant_name,
            "outlet_name": sub.outlet_name,
            "sa_password": sub.sa_password,
            "anydesk_username": sub.anydesk_username or "",
            "anydesk_password": sub.anydesk_password or "",
            "ultraviewer_username": sub.ultraviewer_username or "",
            "ultraviewer_password": sub.ultraviewer_password or "",
            "sa_pass_change": sub.sa_pass_change,
            "synced_user_pass_change": sub.synced_user_pass_change,
            "non_sa_pass_change": sub.non_sa_pass_change,
            "windows_auth_disable": sub.windows_auth_disable,
            "sql_custom_port": sub.sql_custom_port,
            "firewall_on_all_pcs": sub.firewall_on_all_pcs,
            "anydesk_uninstall": sub.anydesk_uninstall,
            "ultraviewer_pass_and_id": sub.ultraviewer_pass_and_id,
            "pos_admin_pass_change": sub.pos_admin_pass_change,
            "remarks": sub.remarks or "",
            "user_agent": sub.user_agent or "",
            "ip_address": sub.ip_address or "",
            "created_at": as_utc(sub.created_at),
            "updated_at": as_utc(sub.updated_at),
        }


class ConfigurationRecord(SubmissionRecordBase):
    non_sa_username: str
    non_sa_password: str

    @classmethod
    def from_submission(cls, sub) -> "ConfigurationRecord":
        first = (sub.non_sa_credentials or [{}])[0]
        return cls(
            non_sa_username=first.get("username", ""),
            non_sa_password=first.get("password", ""),
            **cls._common_fields(sub),
        )


class FormRecord(SubmissionRecordBase):
    non_sa_credentials: list[Credential]

    @classmethod
    def from_submission(cls, sub) -> "FormRecord":
        return cls(
            non_sa_credentials=[Credential(**c) for c in sub.non_sa_credentials or []],
            **cls._common_fields(sub),
        )


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class ConfigurationListResponse(BaseModel):
    configurations: list[ConfigurationRecord]
    pagination: Pagination


class FormListResponse(BaseModel):
    forms: list[FormRecord]
    pagination: Pagination
