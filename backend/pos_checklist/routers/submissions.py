"""
Submit/list routes for checklist submissions.

Configuration and form submissions are served by two routers built from the
same factory; they differ only in the submission kind, the response envelope
key and how the non-SA credentials are rendered.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pos_checklist.auth import UserPrincipal, get_current_user
from pos_checklist.config import get_settings
from pos_checklist.database import get_db
from pos_checklist.exceptions import SubmissionValidationError
from pos_checklist.logging_config import logger
from pos_checklist.models.submission import KIND_CONFIGURATION, KIND_FORM
from pos_checklist.schemas.submission import (
    ConfigurationCreatedResponse,
    ConfigurationListResponse,
    ConfigurationRecord,
    FormCreatedResponse,
    FormListResponse,
    FormRecord,
    Pagination,
    SubmissionPayload,
    SubmissionSummary,
)
from pos_checklist.services import submission_service

INTERNAL_ERROR_DETAIL = "Internal server error. Please try again."


def make_submission_router(
    kind: str,
    label: str,
    created_key: str,
    list_key: str,
    record_cls,
    created_response,
    list_response,
) -> APIRouter:
    router = APIRouter()

    @router.post("/submit", response_model=created_response, status_code=201)
    async def submit(
        payload: SubmissionPayload,
        request: Request,
        db: AsyncSession = Depends(get_db),
        current_user: UserPrincipal = Depends(get_current_user),
    ):
        ip_address = submission_service.extract_client_ip(request.headers)
        try:
            submission = await submission_service.create_submission(
                db, current_user, payload, kind, ip_address=ip_address
            )
        except SubmissionValidationError as e:
            return JSONResponse(status_code=400, content=e.to_dict())
        except SQLAlchemyError:
            logger.exception("%s submission failed", label)
            raise HTTPException(status_code=500, detail=INTERNAL_ERROR_DETAIL)

        return created_response(**{
            "message": f"{label} submitted successfully",
            created_key: SubmissionSummary.from_submission(submission),
        })

    @router.get("/list", response_model=list_response)
    async def list_submissions(
        page: int = Query(1, ge=1),
        limit: Optional[int] = Query(None, ge=1),
        db: AsyncSession = Depends(get_db),
        current_user: UserPrincipal = Depends(get_current_user),
    ):
        settings = get_settings()
        if limit is None:
            limit = settings.page_size_default
        if limit > settings.page_size_max:
            raise HTTPException(
                status_code=400,
                detail=f"limit must not exceed {settings.page_size_max}",
            )

        try:
            submissions, pagination = await submission_service.list_submissions(
                db, current_user.user_id, kind, page=page, limit=limit
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except SQLAlchemyError:
            logger.exception("%s list failed", label)
            raise HTTPException(status_code=500, detail=INTERNAL_ERROR_DETAIL)

        return list_response(**{
            list_key: [record_cls.from_submission(s) for s in submissions],
            "pagination": Pagination(**pagination),
        })

    return router


configuration_router = make_submission_router(
    kind=KIND_CONFIGURATION,
    label="Configuration",
    created_key="configuration",
    list_key="configurations",
    record_cls=ConfigurationRecord,
    created_response=ConfigurationCreatedResponse,
    list_response=ConfigurationListResponse,
)

form_router = make_submission_router(
    kind=KIND_FORM,
    label="Form",
    created_key="form",
    list_key="forms",
    record_cls=FormRecord,
    created_response=FormCreatedResponse,
    list_response=FormListResponse,
)
