from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query, status

from nodex.common.deps import get_actor, get_admin_workflow, get_workflow
from nodex.common.errors import ForbiddenError
from nodex.features.profiles.schemas import Role
from .schemas import (
    Actor,
    ApplicationProgress,
    ApplicationSubmission,
    BulkDeleteRequest,
    CertificateData,
    DeletionSummary,
    PaymentOutcome,
    PaymentSubmission,
    SubmissionOutcome,
    TrackerSummary,
    VerificationOutcome,
    VerificationRequest,
)
from .service import WorkflowService

router = APIRouter(prefix="/applications", tags=["applications"])


@router.post("", response_model=SubmissionOutcome, status_code=status.HTTP_201_CREATED)
async def submit_application(
    payload: ApplicationSubmission,
    actor: Actor = Depends(get_actor),
    workflow: WorkflowService = Depends(get_workflow),
):
    if actor.role is not Role.student:
        raise ForbiddenError("Only students can submit applications")
    return await workflow.submit_application(
        actor.user_id,
        payload.department,
        payload.semester,
        payload.batch,
        payload.subjects,
    )


@router.get("/queue", response_model=List[ApplicationProgress])
async def verification_queue(
    actor: Actor = Depends(get_actor),
    workflow: WorkflowService = Depends(get_workflow),
):
    return await workflow.list_queue(actor)


@router.get("/tracker", response_model=TrackerSummary)
async def application_tracker(
    batch: str = Query(..., examples=["2023-27"]),
    department: str = Query(..., examples=["CSE"]),
    actor: Actor = Depends(get_actor),
    workflow: WorkflowService = Depends(get_workflow),
):
    return await workflow.tracker_summary(batch, department, actor)


@router.post("/bulk-delete", response_model=DeletionSummary)
async def delete_all_applications(
    payload: BulkDeleteRequest,
    actor: Actor = Depends(get_actor),
    workflow: WorkflowService = Depends(get_admin_workflow),
):
    return await workflow.delete_all_applications(payload.batch, payload.department, actor)


@router.post("/{application_id}/verify", response_model=VerificationOutcome)
async def verify_application(
    application_id: str,
    payload: VerificationRequest,
    actor: Actor = Depends(get_actor),
    workflow: WorkflowService = Depends(get_workflow),
):
    return await workflow.verify_with_retry(application_id, actor, payload.decision, payload.comment)


@router.post("/{application_id}/payment", response_model=PaymentOutcome)
async def submit_payment(
    application_id: str,
    payload: PaymentSubmission,
    actor: Actor = Depends(get_actor),
    workflow: WorkflowService = Depends(get_workflow),
):
    return await workflow.submit_payment(application_id, payload.transaction_id, payload.submitter_name, actor)


@router.get("/{application_id}/progress", response_model=ApplicationProgress)
async def application_progress(
    application_id: str,
    actor: Actor = Depends(get_actor),
    workflow: WorkflowService = Depends(get_workflow),
):
    return await workflow.get_progress(application_id, actor)


@router.get("/{application_id}/certificate", response_model=CertificateData)
async def application_certificate(
    application_id: str,
    actor: Actor = Depends(get_actor),
    workflow: WorkflowService = Depends(get_workflow),
):
    return await workflow.certificate_data(application_id, actor)


@router.delete("/{application_id}", response_model=DeletionSummary)
async def delete_application(
    application_id: str,
    actor: Actor = Depends(get_actor),
    workflow: WorkflowService = Depends(get_admin_workflow),
):
    return await workflow.delete_application(application_id, actor)
