from __future__ import annotations

from flask import Flask, request

from ..common.http import api_view, current_principal, login_required, ok, parse_body
from ..core.enums import OnboardingStatus
from ..core.exceptions import ValidationError
from ..container import Container
from .model import OnboardingSubmission
from .schemas import CreateSubmissionBody, ReviewStepBody, SubmitStepBody


def _present(sub: OnboardingSubmission) -> dict:
    return {"submission": sub, "progress": sub.progress_percent}


def register(app: Flask, container: Container) -> None:
    @app.route("/onboarding/submissions", methods=["POST"], endpoint="create_onboarding")
    @api_view
    @login_required
    def create_onboarding():
        body = parse_body(CreateSubmissionBody)
        sub = container.onboarding_service.create_submission(current_principal(), employee_id=body.employee_id)
        return ok(_present(sub), message="Onboarding created successfully", status=201)

    @app.route("/onboarding/submissions", methods=["GET"], endpoint="list_onboarding")
    @api_view
    @login_required
    def list_onboarding():
        raw = request.args.get("status")
        try:
            status = OnboardingStatus(raw) if raw else None
        except ValueError:
            raise ValidationError("Unknown status filter")
        subs = container.onboarding_service.list_submissions(current_principal(), status=status)
        return ok({"submissions": [_present(s) for s in subs]})

    @app.route("/onboarding/submissions/<int:submission_id>", methods=["GET"], endpoint="get_onboarding")
    @api_view
    @login_required
    def get_onboarding(submission_id: int):
        return ok(_present(container.onboarding_service.get_submission(current_principal(), submission_id)))

    @app.route("/onboarding/submissions/<int:submission_id>/cancel", methods=["POST"], endpoint="cancel_onboarding")
    @api_view
    @login_required
    def cancel_onboarding(submission_id: int):
        sub = container.onboarding_service.cancel_submission(current_principal(), submission_id)
        return ok(_present(sub), message="Onboarding cancelled")

    @app.route("/onboarding/my-status", methods=["GET"], endpoint="my_onboarding")
    @api_view
    @login_required
    def my_onboarding():
        sub = container.onboarding_service.my_status(current_principal())
        if sub is None:
            return ok({"submission": None, "progress": 0}, message="No onboarding found")
        return ok(_present(sub))

    @app.route("/onboarding/steps/<int:step_id>", methods=["PUT", "POST"], endpoint="submit_onboarding_step")
    @api_view
    @login_required
    def submit_onboarding_step(step_id: int):
        body = parse_body(SubmitStepBody)
        step = container.onboarding_service.submit_step(
            current_principal(), step_id, step_data=body.step_data, expected_version=body.version
        )
        return ok({"step": step}, message="Step submitted")

    @app.route("/onboarding/steps/<int:step_id>/review", methods=["POST"], endpoint="review_onboarding_step")
    @api_view
    @login_required
    def review_onboarding_step(step_id: int):
        body = parse_body(ReviewStepBody)
        step = container.onboarding_service.review_step(
            current_principal(),
            step_id,
            status=body.status,
            comments=body.comments,
            rejection_reason=body.rejection_reason,
            expected_version=body.version,
        )
        return ok({"step": step}, message=f"Step {step.status.value.lower()}")
