"""
Service-level tests for EvaluationService against a real database session
"""
import pytest

from app.core.config import settings
from app.core.exceptions import (
    FacultySubmissionRequiredError,
    ScoreExceedsMaxError,
    ScoresAlreadySubmittedError,
    ValidationError,
    EvaluationNotFoundError,
)
from app.models.evaluation import EvaluationStatus, EvaluationType, ScoringRole
from app.services.evaluation_service import EvaluationService


@pytest.fixture
def service(db_session) -> EvaluationService:
    return EvaluationService(db_session)


@pytest.fixture
async def evaluation(service, project, faculty_user):
    return await service.create_evaluation(
        project.id,
        EvaluationType.milestone,
        [
            {"criterion": "Design", "max_score": 5},
            {"criterion": "Project Recognition", "max_score": 10, "reviewer_max_score": 4},
        ],
        created_by=faculty_user.id,
    )


def item_ids(evaluation) -> dict:
    return {item.criterion: str(item.id) for item in evaluation.rubric_items}


@pytest.mark.asyncio
async def test_submit_locks_targeted_items(service, evaluation, faculty_user):
    ids = item_ids(evaluation)

    updated = await service.submit_scores(
        evaluation.id, ScoringRole.faculty,
        [{"item_id": ids["Design"], "value": 4}],
        submitted_by=faculty_user.id,
    )

    assert updated.faculty_submitted is True
    assert updated.status == EvaluationStatus.faculty_evaluated
    design = updated.get_item(ids["Design"])
    assert design.is_locked(ScoringRole.faculty)
    assert design.faculty_submitted_by == faculty_user.id
    # Items left out of the batch stay open
    assert not updated.get_item(ids["Project Recognition"]).is_locked(ScoringRole.faculty)


@pytest.mark.asyncio
async def test_second_submission_always_rejected(service, evaluation):
    ids = item_ids(evaluation)
    await service.submit_scores(evaluation.id, ScoringRole.reviewer, [{"item_id": ids["Design"], "value": 1}])

    with pytest.raises(ScoresAlreadySubmittedError):
        await service.submit_scores(evaluation.id, ScoringRole.reviewer, [{"item_id": ids["Design"], "value": 2}])


@pytest.mark.asyncio
async def test_role_ceiling_override(service, evaluation):
    ids = item_ids(evaluation)

    with pytest.raises(ScoreExceedsMaxError) as exc_info:
        await service.submit_scores(
            evaluation.id, ScoringRole.reviewer,
            [{"item_id": ids["Design"], "value": 5}, {"item_id": ids["Project Recognition"], "value": 5}],
        )

    assert exc_info.value.details["invalid_scores"] == [
        {"criterion": "Project Recognition", "max_score": 4, "submitted_score": 5.0},
    ]
    stored = await service.get_evaluation(evaluation.id)
    assert stored.reviewer_submitted is False
    assert stored.get_item(ids["Design"]).score_value(ScoringRole.reviewer) is None


@pytest.mark.asyncio
async def test_duplicate_item_rejected(service, evaluation):
    ids = item_ids(evaluation)

    with pytest.raises(ValidationError):
        await service.submit_scores(
            evaluation.id, ScoringRole.faculty,
            [{"item_id": ids["Design"], "value": 1}, {"item_id": ids["Design"], "value": 2}],
        )


@pytest.mark.asyncio
async def test_completed_is_terminal(service, evaluation):
    ids = item_ids(evaluation)
    await service.submit_scores(evaluation.id, ScoringRole.faculty, [{"item_id": ids["Design"], "value": 4}])
    done = await service.submit_scores(evaluation.id, ScoringRole.reviewer, [{"item_id": ids["Design"], "value": 3}])
    assert done.status == EvaluationStatus.completed

    for role in ScoringRole:
        with pytest.raises(ScoresAlreadySubmittedError):
            await service.submit_scores(evaluation.id, role, [{"item_id": ids["Design"], "value": 1}])

    stored = await service.get_evaluation(evaluation.id)
    assert stored.status == EvaluationStatus.completed
    assert stored.total_score(ScoringRole.faculty) == 4
    assert stored.total_score(ScoringRole.reviewer) == 3


@pytest.mark.asyncio
async def test_reviewer_waits_for_faculty_when_configured(service, evaluation, monkeypatch):
    monkeypatch.setattr(settings, "REVIEWER_REQUIRES_FACULTY_SUBMISSION", True)
    ids = item_ids(evaluation)

    with pytest.raises(FacultySubmissionRequiredError):
        await service.submit_scores(evaluation.id, ScoringRole.reviewer, [{"item_id": ids["Design"], "value": 3}])

    await service.submit_scores(evaluation.id, ScoringRole.faculty, [{"item_id": ids["Design"], "value": 4}])
    updated = await service.submit_scores(evaluation.id, ScoringRole.reviewer, [{"item_id": ids["Design"], "value": 3}])
    assert updated.status == EvaluationStatus.completed


@pytest.mark.asyncio
async def test_reviewer_cannot_change_evaluation_type(service, evaluation):
    ids = item_ids(evaluation)

    updated = await service.submit_scores(
        evaluation.id, ScoringRole.reviewer,
        [{"item_id": ids["Design"], "value": 3}],
        evaluation_type=EvaluationType.final,
    )

    assert updated.evaluation_type == EvaluationType.milestone


@pytest.mark.asyncio
async def test_missing_evaluation(service):
    with pytest.raises(EvaluationNotFoundError):
        await service.get_evaluation("does-not-exist")


@pytest.mark.asyncio
async def test_import_never_touches_existing_evaluations(service, evaluation, project, make_workbook):
    content = make_workbook([{"ProjectName": project.title, "Design": 3}])

    results = await service.create_evaluations_from_spreadsheet(content, "milestone")

    assert results[0]["success"] is True
    assert results[0]["evaluation_id"] != evaluation.id
    original = await service.get_evaluation(evaluation.id)
    assert original.has_prefilled_scores is False
    assert original.get_item(item_ids(evaluation)["Design"]).score_value(ScoringRole.faculty) is None
    assert len(await service.list_for_team(project.team_id)) == 2


@pytest.mark.asyncio
async def test_import_rejects_unknown_type(service, make_workbook):
    content = make_workbook([{"ProjectName": "Alpha", "Design": 3}])

    with pytest.raises(ValidationError):
        await service.create_evaluations_from_spreadsheet(content, "weekly")
