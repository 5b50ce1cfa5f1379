import math
from typing import Mapping, Optional

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pos_checklist.auth import UserPrincipal
from pos_checklist.exceptions import SubmissionValidationError
from pos_checklist.logging_config import logger
from pos_checklist.models.submission import Submission, KIND_CONFIGURATION, KIND_FORM, KINDS, TASK_FLAGS
from pos_checklist.schemas.submission import SubmissionPayload

# (attribute, wire name) pairs, checked in this order
REQUIRED_FIELDS = [
    ("restaurant_name", "restaurantName"),
    ("outlet_name", "outletName"),
    ("sa_password", "saPassword"),
]
CONFIGURATION_REQUIRED_FIELDS = [
    ("non_sa_username", "nonSaUsername"),
    ("non_sa_password", "nonSaPassword"),
]

OPTIONAL_TEXT_FIELDS = (
    "anydesk_username",
    "anydesk_password",
    "ultraviewer_username",
    "ultraviewer_password",
    "remarks",
    "user_agent",
)

# Largest row offset the database accepts (signed 64-bit)
MAX_OFFSET = 2 ** 63 - 1

# Forwarding headers consulted for the caller's address, most trusted first
CLIENT_IP_HEADERS = ("x-forwarded-for", "x-real-ip", "cf-connecting-ip")
UNKNOWN_IP = "unknown"


def _is_blank(value: Optional[str]) -> bool:
    return value is None or value.strip() == ""


def validate_submission(payload: SubmissionPayload, kind: str) -> None:
    """Raise SubmissionValidationError for the first missing or blank required value."""
    if kind not in KINDS:
        raise ValueError(f"Unknown submission kind: {kind}")

    required = list(REQUIRED_FIELDS)
    if kind == KIND_CONFIGURATION:
        required += CONFIGURATION_REQUIRED_FIELDS
    for attr, wire_name in required:
        if _is_blank(getattr(payload, attr)):
            raise SubmissionValidationError(wire_name, f"{wire_name} is required")

    if kind == KIND_FORM:
        if not payload.non_sa_credentials:
            raise SubmissionValidationError(
                "nonSaCredentials", "At least one Non-SA credential is required"
            )
        for i, credential in enumerate(payload.non_sa_credentials):
            if _is_blank(credential.username):
                raise SubmissionValidationError(
                    "username", f"Non-SA credential #{i + 1}: Username is required", index=i
                )
            if _is_blank(credential.password):
                raise SubmissionValidationError(
                    "password", f"Non-SA credential #{i + 1}: Password is required", index=i
                )


def normalize_credentials(payload: SubmissionPayload, kind: str) -> list[dict]:
    """The non-SA accounts of a validated payload as a list of plain dicts."""
    if kind == KIND_CONFIGURATION:
        return [{"username": payload.non_sa_username.strip(), "password": payload.non_sa_password}]
    return [
        {"username": c.username.strip(), "password": c.password}
        for c in payload.non_sa_credentials
    ]


def extract_client_ip(headers: Mapping[str, str]) -> str:
    """Best-effort caller address from proxy headers; never fails."""
    for header in CLIENT_IP_HEADERS:
        value = headers.get(header)
        if not value:
            continue
        candidate = value.split(",")[0].strip()
        if candidate:
            return candidate
    return UNKNOWN_IP


async def create_submission(
    db: AsyncSession,
    principal: UserPrincipal,
    payload: SubmissionPayload,
    kind: str,
    ip_address: str = UNKNOWN_IP,
) -> Submission:
    """
    Validate and persist one checklist owned by ``principal``.

    Nothing is written when validation fails. The insert is a single commit;
    on a database error the session is rolled back and the error re-raised.
    """
    validate_submission(payload, kind)

    submission = Submission(
        kind=kind,
        owner_user_id=principal.user_id,
        owner_username=principal.username,
        restaurant_name=payload.restaurant_name.strip(),
        outlet_name=payload.outlet_name.strip(),
        sa_password=payload.sa_password,
        non_sa_credentials=normalize_credentials(payload, kind),
        ip_address=ip_address or UNKNOWN_IP,
        **{name: (getattr(payload, name) or "") for name in OPTIONAL_TEXT_FIELDS},
        **{flag: bool(getattr(payload, flag)) for flag in TASK_FLAGS},
    )
    db.add(submission)
    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        raise
    logger.info("Stored %s submission %s for user %s", kind, submission.id, principal.user_id)
    return submission


async def list_submissions(
    db: AsyncSession,
    user_id: str,
    kind: str,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[Submission], dict]:
    """
    One page of the user's submissions of ``kind``, newest first, and the
    pagination block ``{page, limit, total, pages}``.
    """
    if page < 1 or limit < 1:
        raise ValueError("page and limit must be positive")
    if (page - 1) * limit > MAX_OFFSET:
        raise ValueError("page is out of range")

    query = select(Submission).where(
        Submission.owner_user_id == user_id,
        Submission.kind == kind,
    )

    count_query = select(func.count()).select_from(query.subquery())
    total = await db.scalar(count_query) or 0

    query = query.order_by(Submission.created_at.desc()).offset((page - 1) * limit).limit(limit)
    result = await db.execute(query)
    submissions = list(result.scalars().all())

    pagination = {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit),
    }
    return submissions, pagination
