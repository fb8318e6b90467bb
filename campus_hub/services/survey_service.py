import logging
from collections.abc import Sequence

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.exceptions import (
    AlreadySubmittedError,
    AnswerValidationError,
    ForbiddenError,
    SurveyNotFoundError,
)
from ..database import transaction
from ..models.enums import QuestionType, SurveyStatus
from ..models.survey import (
    QuestionOption,
    Survey,
    SurveyAnswer,
    SurveyQuestion,
    SurveySubmission,
)
from ..schemas.survey import SurveyAnswerCreate, SurveyCreate

logger = logging.getLogger(__name__)


class SurveyService:
    db: AsyncSession

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_survey(self, survey_data: SurveyCreate, creator_id: int) -> Survey:
        async with transaction(self.db):
            survey = Survey(
                title=survey_data.title,
                description=survey_data.description,
                status=survey_data.status,
                creator_id=creator_id,
            )
            self.db.add(survey)
            await self.db.flush()

            for position, question_data in enumerate(survey_data.questions):
                question = SurveyQuestion(
                    survey_id=survey.id,
                    question_text=question_data.question_text,
                    question_type=question_data.question_type,
                    position=position,
                )
                self.db.add(question)
                await self.db.flush()

                self.db.add_all(
                    QuestionOption(question_id=question.id, option_text=option_text)
                    for option_text in question_data.options
                )

        logger.info(f"Survey {survey.id} created by user {creator_id}")
        return survey

    def _survey_query(self):
        return select(Survey).options(
            selectinload(Survey.questions).selectinload(SurveyQuestion.options)
        )

    async def get_survey(self, survey_id: int) -> Survey | None:
        result = await self.db.execute(
            self._survey_query()
            .where(Survey.id == survey_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_active_survey(self, survey_id: int) -> Survey:
        result = await self.db.execute(
            self._survey_query().where(
                Survey.id == survey_id, Survey.status == SurveyStatus.ACTIVE
            )
        )
        survey = result.scalar_one_or_none()
        if not survey:
            raise SurveyNotFoundError()
        return survey

    async def has_submitted(self, survey_id: int, user_id: int) -> bool:
        result = await self.db.execute(
            select(SurveySubmission.id).where(
                SurveySubmission.survey_id == survey_id,
                SurveySubmission.user_id == user_id,
            )
        )
        return result.scalar_one_or_none() is not None

    async def get_survey_for_participant(self, survey_id: int, user_id: int) -> Survey:
        if await self.has_submitted(survey_id, user_id):
            raise ForbiddenError("You have already participated in this survey")
        return await self.get_active_survey(survey_id)

    async def submit(
        self,
        survey_id: int,
        user_id: int,
        answers: Sequence[SurveyAnswerCreate],
    ) -> SurveySubmission:
        """Record one user's answers to a survey, all or nothing.

        A second submission for the same (survey, user) is rejected with
        ``AlreadySubmittedError``. Two concurrent first submissions can both
        pass the existence check; the unique constraint on
        ``survey_submissions`` rejects the loser on insert with the same error.
        """
        async with transaction(self.db):
            survey = await self.get_active_survey(survey_id)

            if await self.has_submitted(survey_id, user_id):
                raise AlreadySubmittedError()

            self.validate_answers(survey, answers)

            submission = SurveySubmission(survey_id=survey_id, user_id=user_id)
            self.db.add(submission)
            try:
                await self.db.flush()
            except IntegrityError as e:
                raise AlreadySubmittedError() from e

            for answer in answers:
                await self._insert_answer(submission, answer)

        logger.info(
            f"User {user_id} submitted survey {survey_id} with {len(answers)} answers"
        )
        return submission

    async def _insert_answer(
        self, submission: SurveySubmission, answer: SurveyAnswerCreate
    ) -> SurveyAnswer:
        row = SurveyAnswer(
            submission_id=submission.id,
            question_id=answer.question_id,
            option_id=answer.option_id,
            answer_text=answer.answer_text,
        )
        self.db.add(row)
        await self.db.flush()
        return row

    @staticmethod
    def validate_answers(
        survey: Survey, answers: Sequence[SurveyAnswerCreate]
    ) -> None:
        questions = {question.id: question for question in survey.questions}
        answered: dict[int, set[int | None]] = {}

        for answer in answers:
            question = questions.get(answer.question_id)
            if question is None:
                raise AnswerValidationError(
                    f"Question {answer.question_id} does not belong to this survey"
                )

            seen = answered.setdefault(question.id, set())

            if question.question_type == QuestionType.TEXT:
                if answer.option_id is not None:
                    raise AnswerValidationError(
                        f"Question {question.id} expects a text answer, not an option"
                    )
                if not answer.answer_text:
                    raise AnswerValidationError(
                        f"Question {question.id} requires a text answer"
                    )
                if seen:
                    raise AnswerValidationError(
                        f"Question {question.id} was answered more than once"
                    )
                seen.add(None)
                continue

            if answer.option_id is None:
                raise AnswerValidationError(
                    f"Question {question.id} requires an option to be chosen"
                )
            if answer.answer_text is not None:
                raise AnswerValidationError(
                    f"Question {question.id} does not accept free text"
                )
            if answer.option_id not in {option.id for option in question.options}:
                raise AnswerValidationError(
                    f"Option {answer.option_id} does not belong to question {question.id}"
                )
            if question.question_type == QuestionType.SINGLE_CHOICE and seen:
                raise AnswerValidationError(
                    f"Question {question.id} accepts a single option"
                )
            if answer.option_id in seen:
                raise AnswerValidationError(
                    f"Option {answer.option_id} was chosen more than once"
                )
            seen.add(answer.option_id)

    async def list_surveys_with_counts(self) -> list[tuple[Survey, int]]:
        submission_count = (
            select(func.count(SurveySubmission.id))
            .where(SurveySubmission.survey_id == Survey.id)
            .correlate(Survey)
            .scalar_subquery()
        )
        result = await self.db.execute(
            select(Survey, submission_count)
            .options(selectinload(Survey.creator))
            .order_by(Survey.created_at.desc(), Survey.id.desc())
        )
        return [(survey, count or 0) for survey, count in result.all()]

    async def list_active_for_user(self, user_id: int) -> list[tuple[Survey, bool]]:
        result = await self.db.execute(
            select(Survey)
            .where(Survey.status == SurveyStatus.ACTIVE)
            .order_by(Survey.created_at.desc(), Survey.id.desc())
        )
        surveys = list(result.scalars().all())

        submitted = await self.db.execute(
            select(SurveySubmission.survey_id).where(
                SurveySubmission.user_id == user_id
            )
        )
        submitted_ids = set(submitted.scalars().all())

        return [(survey, survey.id in submitted_ids) for survey in surveys]
