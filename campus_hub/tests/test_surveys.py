import asyncio

import pytest
from fastapi import status
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select

from campus_hub.core.exceptions import (
    AlreadySubmittedError,
    AnswerValidationError,
    PortalError,
    SurveyNotFoundError,
)
from campus_hub.core.security import TokenService
from campus_hub.database import Database
from campus_hub.models.enums import SurveyStatus
from campus_hub.models.survey import Survey, SurveyAnswer, SurveySubmission
from campus_hub.models.user import User
from campus_hub.schemas.survey import SurveyAnswerCreate
from campus_hub.services.survey_service import SurveyService

from .test_utils import count_rows, create_survey, get_auth_headers


def _valid_answers(survey: Survey) -> list[SurveyAnswerCreate]:
    choice, text, _multi = survey.questions
    return [
        SurveyAnswerCreate(question_id=choice.id, option_id=choice.options[0].id),
        SurveyAnswerCreate(question_id=text.id, answer_text="ok"),
    ]


async def _submit(database: Database, survey_id: int, user_id: int, answers):
    async with database.sessionmaker() as session:
        try:
            await SurveyService(session).submit(survey_id, user_id, answers)
        except PortalError as e:
            return type(e)
        return "confirmed"


class TestSubmissionRecorder:

    @pytest.mark.asyncio
    async def test_submit_then_resubmit(
        self, database: Database, admin: User, student: User
    ):
        survey = await create_survey(database, admin)
        answers = _valid_answers(survey)

        first = await _submit(database, survey.id, student.id, answers)
        second = await _submit(database, survey.id, student.id, answers)

        assert first == "confirmed"
        assert second is AlreadySubmittedError
        assert await count_rows(
            database, SurveySubmission, SurveySubmission.survey_id == survey.id
        ) == 1

        async with database.sessionmaker() as session:
            submission_id = (
                await session.execute(
                    select(SurveySubmission.id).where(
                        SurveySubmission.survey_id == survey.id
                    )
                )
            ).scalar_one()
        assert await count_rows(
            database, SurveyAnswer, SurveyAnswer.submission_id == submission_id
        ) == 2

    @pytest.mark.asyncio
    async def test_concurrent_duplicates_yield_one_submission(
        self, database: Database, admin: User, student: User
    ):
        survey = await create_survey(database, admin)
        answers = _valid_answers(survey)

        results = await asyncio.gather(
            *(_submit(database, survey.id, student.id, answers) for _ in range(4))
        )

        assert results.count("confirmed") == 1
        assert results.count(AlreadySubmittedError) == 3
        assert await count_rows(
            database,
            SurveySubmission,
            SurveySubmission.survey_id == survey.id,
            SurveySubmission.user_id == student.id,
        ) == 1

    @pytest.mark.asyncio
    async def test_failure_mid_answers_rolls_back_everything(
        self, database: Database, admin: User, student: User, monkeypatch
    ):
        survey = await create_survey(database, admin)
        choice, text, multi = survey.questions
        answers = [
            SurveyAnswerCreate(question_id=choice.id, option_id=choice.options[1].id),
            SurveyAnswerCreate(question_id=text.id, answer_text="fine"),
            SurveyAnswerCreate(question_id=multi.id, option_id=multi.options[0].id),
        ]

        original_insert = SurveyService._insert_answer
        calls = {"count": 0}

        async def failing_insert(self, submission, answer):
            calls["count"] += 1
            if calls["count"] == 3:
                raise RuntimeError("storage failure")
            return await original_insert(self, submission, answer)

        monkeypatch.setattr(SurveyService, "_insert_answer", failing_insert)

        async with database.sessionmaker() as session:
            with pytest.raises(RuntimeError):
                await SurveyService(session).submit(survey.id, student.id, answers)

        assert calls["count"] == 3
        assert await count_rows(database, SurveySubmission) == 0
        assert await count_rows(database, SurveyAnswer) == 0

        monkeypatch.setattr(SurveyService, "_insert_answer", original_insert)
        assert await _submit(database, survey.id, student.id, answers) == "confirmed"

    @pytest.mark.asyncio
    async def test_inactive_survey_is_not_found(
        self, database: Database, admin: User, student: User
    ):
        draft = await create_survey(database, admin, status=SurveyStatus.DRAFT)
        closed = await create_survey(database, admin, status=SurveyStatus.CLOSED)

        assert (
            await _submit(database, draft.id, student.id, _valid_answers(draft))
            is SurveyNotFoundError
        )
        assert (
            await _submit(database, closed.id, student.id, _valid_answers(closed))
            is SurveyNotFoundError
        )
        assert await _submit(database, 424242, student.id, []) is SurveyNotFoundError


class TestAnswerValidation:

    @pytest.mark.asyncio
    async def test_rejected_answers_leave_no_rows(
        self, database: Database, admin: User, student: User
    ):
        survey = await create_survey(database, admin)
        other = await create_survey(database, admin)
        choice, text, multi = survey.questions
        foreign_choice = other.questions[0]

        invalid_sets = [
            # question from another survey
            [
                SurveyAnswerCreate(
                    question_id=foreign_choice.id,
                    option_id=foreign_choice.options[0].id,
                )
            ],
            # option belonging to a different question
            [SurveyAnswerCreate(question_id=choice.id, option_id=multi.options[0].id)],
            # text answer for a choice question
            [SurveyAnswerCreate(question_id=choice.id, answer_text="Good")],
            # option for a text question
            [SurveyAnswerCreate(question_id=text.id, option_id=choice.options[0].id)],
            # two options for a single-choice question
            [
                SurveyAnswerCreate(question_id=choice.id, option_id=choice.options[0].id),
                SurveyAnswerCreate(question_id=choice.id, option_id=choice.options[1].id),
            ],
            # same option twice on a multiple-choice question
            [
                SurveyAnswerCreate(question_id=multi.id, option_id=multi.options[0].id),
                SurveyAnswerCreate(question_id=multi.id, option_id=multi.options[0].id),
            ],
            # text question answered twice
            [
                SurveyAnswerCreate(question_id=text.id, answer_text="one"),
                SurveyAnswerCreate(question_id=text.id, answer_text="two"),
            ],
        ]

        for answers in invalid_sets:
            result = await _submit(database, survey.id, student.id, answers)
            assert result is AnswerValidationError

        assert await count_rows(database, SurveySubmission) == 0
        assert await count_rows(database, SurveyAnswer) == 0

    @pytest.mark.asyncio
    async def test_multiple_choice_accepts_several_options(
        self, database: Database, admin: User, student: User
    ):
        survey = await create_survey(database, admin)
        multi = survey.questions[2]
        answers = [
            SurveyAnswerCreate(question_id=multi.id, option_id=option.id)
            for option in multi.options[:2]
        ]

        assert await _submit(database, survey.id, student.id, answers) == "confirmed"
        assert await count_rows(database, SurveyAnswer) == 2

    def test_answer_needs_option_or_text(self):
        with pytest.raises(ValueError):
            SurveyAnswerCreate(question_id=1)

        with pytest.raises(ValueError):
            SurveyAnswerCreate(question_id=1, answer_text="   ")


class TestStudentSurveyEndpoints:

    @pytest.mark.asyncio
    async def test_submit_survey_returns_201_then_409(
        self,
        async_client: AsyncClient,
        token_service: TokenService,
        database: Database,
        admin: User,
        student: User,
    ):
        survey = await create_survey(database, admin)
        choice, text, _multi = survey.questions
        payload = {
            "answers": [
                {"question_id": choice.id, "option_id": choice.options[0].id},
                {"question_id": text.id, "answer_text": "ok"},
            ]
        }
        headers = get_auth_headers(token_service, student)
        url = f"/api/student/surveys/{survey.id}/submit"

        first = await async_client.post(url, json=payload, headers=headers)
        second = await async_client.post(url, json=payload, headers=headers)

        assert first.status_code == status.HTTP_201_CREATED
        assert first.json()["survey_id"] == survey.id
        assert second.status_code == status.HTTP_409_CONFLICT

    @pytest.mark.asyncio
    async def test_submit_empty_answers_is_validation_error(
        self,
        async_client: AsyncClient,
        token_service: TokenService,
        database: Database,
        admin: User,
        student: User,
    ):
        survey = await create_survey(database, admin)

        response = await async_client.post(
            f"/api/student/surveys/{survey.id}/submit",
            json={"answers": []},
            headers=get_auth_headers(token_service, student),
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.asyncio
    async def test_mismatched_answer_type_is_422(
        self,
        async_client: AsyncClient,
        token_service: TokenService,
        database: Database,
        admin: User,
        student: User,
    ):
        survey = await create_survey(database, admin)
        text_question = survey.questions[1]

        response = await async_client.post(
            f"/api/student/surveys/{survey.id}/submit",
            json={"answers": [{"question_id": text_question.id, "option_id": 1}]},
            headers=get_auth_headers(token_service, student),
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.asyncio
    async def test_view_survey_before_and_after_submitting(
        self,
        async_client: AsyncClient,
        token_service: TokenService,
        database: Database,
        admin: User,
        student: User,
    ):
        survey = await create_survey(database, admin)
        headers = get_auth_headers(token_service, student)

        before = await async_client.get(
            f"/api/student/surveys/{survey.id}", headers=headers
        )
        assert before.status_code == status.HTTP_200_OK
        assert [q["question_type"] for q in before.json()["questions"]] == [
            "single_choice",
            "text",
            "multiple_choice",
        ]

        await _submit(database, survey.id, student.id, _valid_answers(survey))

        after = await async_client.get(
            f"/api/student/surveys/{survey.id}", headers=headers
        )
        assert after.status_code == status.HTTP_403_FORBIDDEN

        listing = await async_client.get("/api/student/surveys", headers=headers)
        assert listing.json()[0]["has_submitted"] is True

    @pytest.mark.asyncio
    async def test_view_draft_survey_is_404(
        self,
        async_client: AsyncClient,
        token_service: TokenService,
        database: Database,
        admin: User,
        student: User,
    ):
        draft = await create_survey(database, admin, status=SurveyStatus.DRAFT)

        response = await async_client.get(
            f"/api/student/surveys/{draft.id}",
            headers=get_auth_headers(token_service, student),
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_internal_failure_is_generic_500(
        self,
        app,
        token_service: TokenService,
        database: Database,
        admin: User,
        student: User,
        monkeypatch,
    ):
        survey = await create_survey(database, admin)
        choice = survey.questions[0]

        async def broken_insert(self, submission, answer):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(SurveyService, "_insert_answer", broken_insert)

        async with AsyncClient(
            transport=ASGITransport(app=app, raise_app_exceptions=False),
            base_url="http://test",
        ) as client:
            response = await client.post(
                f"/api/student/surveys/{survey.id}/submit",
                json={
                    "answers": [
                        {"question_id": choice.id, "option_id": choice.options[0].id}
                    ]
                },
                headers=get_auth_headers(token_service, student),
            )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert "disk on fire" not in response.text
        assert await count_rows(database, SurveySubmission) == 0


class TestSurveyAdministration:

    @pytest.mark.asyncio
    async def test_admin_creates_survey_with_questions(
        self, async_client: AsyncClient, token_service: TokenService, admin: User
    ):
        payload = {
            "title": "Library satisfaction",
            "status": "active",
            "questions": [
                {
                    "question_text": "Opening hours are",
                    "question_type": "single_choice",
                    "options": ["Too short", "Fine"],
                },
                {"question_text": "Suggestions", "question_type": "text"},
            ],
        }

        response = await async_client.post(
            "/api/surveys/", json=payload, headers=get_auth_headers(token_service, admin)
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["status"] == "active"
        assert [q["position"] for q in data["questions"]] == [0, 1]
        assert [o["option_text"] for o in data["questions"][0]["options"]] == [
            "Too short",
            "Fine",
        ]

    @pytest.mark.asyncio
    async def test_choice_question_without_options_rejected(
        self, async_client: AsyncClient, token_service: TokenService, admin: User
    ):
        payload = {
            "title": "Broken",
            "questions": [
                {"question_text": "Pick one", "question_type": "single_choice"}
            ],
        }

        response = await async_client.post(
            "/api/surveys/", json=payload, headers=get_auth_headers(token_service, admin)
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.asyncio
    async def test_manager_sees_submission_counts(
        self,
        async_client: AsyncClient,
        token_service: TokenService,
        database: Database,
        admin: User,
        manager: User,
        student: User,
    ):
        survey = await create_survey(database, admin)
        await _submit(database, survey.id, student.id, _valid_answers(survey))

        response = await async_client.get(
            "/api/surveys/", headers=get_auth_headers(token_service, manager)
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()[0]["submission_count"] == 1
        assert response.json()[0]["creator"]["id"] == admin.id

    @pytest.mark.asyncio
    async def test_student_cannot_create_survey(
        self, async_client: AsyncClient, token_service: TokenService, student: User
    ):
        response = await async_client.post(
            "/api/surveys/",
            json={
                "title": "Quick poll",
                "questions": [{"question_text": "Why?", "question_type": "text"}],
            },
            headers=get_auth_headers(token_service, student),
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
