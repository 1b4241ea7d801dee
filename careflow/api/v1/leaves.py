"""
Leave endpoints
"""
import json

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from careflow.core.deps import get_db, get_current_user
from careflow.core.errors import AppError, PayloadValidationError
from careflow.schemas.auth import AuthenticatedUser
from careflow.schemas.leave import LeaveOut, LeaveSubmitResponse
from careflow.services.leave_service import parse_leave_submission, submit_leave_request

router = APIRouter()


@router.post("/process", response_model=LeaveSubmitResponse)
async def process_leave_request(
    request: Request,
    db: Session = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """
    Submit a leave request and let the approval rules decide its initial status.

    Body: {"leaveRequest": {employee_id, leave_type, start_date, end_date, reason}}

    Returns {data, status, ruleApplied}. Missing or invalid tokens get 401;
    any other failure is reported as 400 {"error": {"message"}}.
    """
    try:
        try:
            body = json.loads(await request.body())
        except ValueError:
            raise PayloadValidationError("Request body must be valid JSON")
        draft = parse_leave_submission(body)
        leave_request, decision = submit_leave_request(db, draft, current_user)
    except AppError as e:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": {"message": e.message}},
        )

    return LeaveSubmitResponse(
        data=LeaveOut.model_validate(leave_request),
        status=decision.status,
        ruleApplied=decision.rule_name,
    )
