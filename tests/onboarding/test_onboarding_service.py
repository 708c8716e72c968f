from __future__ import annotations

import threading

import pytest

from src.hr_portal.hr_portal.core.enums import OnboardingStatus, OnboardingStepStatus, OnboardingStepType
from src.hr_portal.hr_portal.core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)

DATA = {"phone": "555-0100", "address": "1 Main St"}


@pytest.fixture
def submission(container, admin):
    return container.onboarding_service.create_submission(admin, employee_id=3)


def _step(sub, step_type=OnboardingStepType.PERSONAL_INFORMATION):
    return next(s for s in sub.steps if s.step_type == step_type)


def test_admin_creates_submission_with_every_step(submission, admin):
    assert submission.status == OnboardingStatus.CREATED
    assert submission.created_by == admin.user_id
    assert [s.step_type for s in submission.steps] == list(OnboardingStepType)
    assert all(s.status == OnboardingStepStatus.PENDING for s in submission.steps)
    assert submission.progress_percent == 0


def test_create_rules(container, submission, admin, manager):
    with pytest.raises(AuthorizationError):
        container.onboarding_service.create_submission(manager, employee_id=4)
    with pytest.raises(NotFoundError):
        container.onboarding_service.create_submission(admin, employee_id=99)
    with pytest.raises(ValidationError):
        container.onboarding_service.create_submission(admin, employee_id=3)

    container.onboarding_service.cancel_submission(admin, submission.submission_id)
    again = container.onboarding_service.create_submission(admin, employee_id=3)
    assert again.submission_id != submission.submission_id


def test_first_submit_starts_the_onboarding(container, submission, employee):
    step = _step(submission)
    submitted = container.onboarding_service.submit_step(employee, step.step_id, step_data=DATA)

    assert submitted.status == OnboardingStepStatus.SUBMITTED
    assert submitted.step_data == DATA
    assert submitted.submitted_at is not None
    mine = container.onboarding_service.my_status(employee)
    assert mine.status == OnboardingStatus.IN_PROGRESS


def test_only_the_onboarding_employee_submits(container, submission, other_employee, manager):
    step = _step(submission)
    with pytest.raises(NotFoundError):
        container.onboarding_service.submit_step(other_employee, step.step_id, step_data=DATA)
    with pytest.raises(NotFoundError):
        container.onboarding_service.submit_step(manager, step.step_id, step_data=DATA)
    with pytest.raises(AuthorizationError):
        container.onboarding_service.get_submission(other_employee, submission.submission_id)


def test_submit_needs_data_and_current_version(container, submission, employee):
    step = _step(submission)
    with pytest.raises(ValidationError):
        container.onboarding_service.submit_step(employee, step.step_id, step_data={})
    with pytest.raises(ConflictError):
        container.onboarding_service.submit_step(employee, step.step_id, step_data=DATA, expected_version=step.version + 1)


def test_editing_a_submitted_step_only_replaces_data(container, submission, employee):
    step = _step(submission)
    first = container.onboarding_service.submit_step(employee, step.step_id, step_data=DATA)
    second = container.onboarding_service.submit_step(employee, step.step_id, step_data={"phone": "555-0199"})

    assert second.status == OnboardingStepStatus.SUBMITTED
    assert second.step_data == {"phone": "555-0199"}
    assert second.submitted_at == first.submitted_at
    assert second.version == first.version + 1


def test_review_outcomes(container, submission, employee, manager):
    step = _step(submission)
    with pytest.raises(InvalidTransitionError):
        container.onboarding_service.review_step(manager, step.step_id, status=OnboardingStepStatus.APPROVED)

    container.onboarding_service.submit_step(employee, step.step_id, step_data=DATA)
    with pytest.raises(ValidationError):
        container.onboarding_service.review_step(manager, step.step_id, status=OnboardingStepStatus.PENDING)
    with pytest.raises(AuthorizationError):
        container.onboarding_service.review_step(employee, step.step_id, status=OnboardingStepStatus.APPROVED)

    changes = container.onboarding_service.review_step(
        manager,
        step.step_id,
        status=OnboardingStepStatus.CHANGES_REQUESTED,
        comments="Add a postcode",
        rejection_reason="Incomplete address",
    )
    assert changes.reviewed_by == manager.user_id
    assert changes.review_comments == "Add a postcode"
    assert changes.rejection_reason == "Incomplete address"

    resubmitted = container.onboarding_service.submit_step(employee, step.step_id, step_data={**DATA, "postcode": "12345"})
    assert resubmitted.status == OnboardingStepStatus.SUBMITTED


def test_all_steps_approved_completes_and_stays_completed(container, submission, employee, admin):
    svc = container.onboarding_service
    for step in submission.steps:
        svc.submit_step(employee, step.step_id, step_data={"step": step.step_type.value})
    for step in submission.steps[:-1]:
        svc.review_step(admin, step.step_id, status=OnboardingStepStatus.APPROVED)
    assert svc.get_submission(admin, submission.submission_id).status == OnboardingStatus.IN_PROGRESS

    svc.review_step(admin, submission.steps[-1].step_id, status=OnboardingStepStatus.APPROVED)
    done = svc.get_submission(employee, submission.submission_id)
    assert done.status == OnboardingStatus.COMPLETED
    assert done.completed_at is not None
    assert done.progress_percent == 100

    with pytest.raises(InvalidTransitionError):
        svc.review_step(admin, submission.steps[0].step_id, status=OnboardingStepStatus.REJECTED)
    with pytest.raises(ValidationError):
        svc.submit_step(employee, submission.steps[0].step_id, step_data=DATA)
    with pytest.raises(InvalidTransitionError):
        svc.cancel_submission(admin, submission.submission_id)
    assert svc.get_submission(admin, submission.submission_id).status == OnboardingStatus.COMPLETED


def test_cancelled_onboarding_is_frozen(container, submission, employee, manager, admin):
    step = _step(submission)
    container.onboarding_service.submit_step(employee, step.step_id, step_data=DATA)

    with pytest.raises(InvalidTransitionError):
        container.onboarding_service.cancel_submission(manager, submission.submission_id)
    cancelled = container.onboarding_service.cancel_submission(admin, submission.submission_id)
    assert cancelled.status == OnboardingStatus.CANCELLED

    with pytest.raises(ValidationError):
        container.onboarding_service.review_step(manager, step.step_id, status=OnboardingStepStatus.APPROVED)
    with pytest.raises(ValidationError):
        container.onboarding_service.submit_step(employee, step.step_id, step_data=DATA)


def test_concurrent_reviews_let_exactly_one_win(container, repos, submission, employee, admin, manager):
    step = _step(submission)
    container.onboarding_service.submit_step(employee, step.step_id, step_data=DATA)

    barrier = threading.Barrier(2)
    repos.onboarding.steps.before_write = lambda _step_id: barrier.wait(timeout=5)

    outcomes: dict[str, object] = {}

    def review(name, principal, status):
        try:
            outcomes[name] = container.onboarding_service.review_step(principal, step.step_id, status=status)
        except ConflictError as e:
            outcomes[name] = e

    threads = [
        threading.Thread(target=review, args=("admin", admin, OnboardingStepStatus.APPROVED)),
        threading.Thread(target=review, args=("manager", manager, OnboardingStepStatus.REJECTED)),
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)
    repos.onboarding.steps.before_write = None

    conflicts = [o for o in outcomes.values() if isinstance(o, ConflictError)]
    winners = [o for o in outcomes.values() if not isinstance(o, ConflictError)]
    assert len(conflicts) == 1
    assert len(winners) == 1

    stored = repos.onboarding.get_step(step_id=step.step_id)
    assert stored.status == winners[0].status
    assert stored.version == step.version + 2


def test_listing_and_stats(container, submission, manager, employee, admin):
    assert [s.submission_id for s in container.onboarding_service.list_submissions(manager)] == [submission.submission_id]
    with pytest.raises(AuthorizationError):
        container.onboarding_service.list_submissions(employee)
    assert container.onboarding_service.my_status(admin) is None

    stats = container.onboarding_service.stats()
    assert stats["CREATED"] == 1
    assert stats["total"] == 1
