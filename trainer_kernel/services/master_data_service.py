"""
MasterDataService -- trainers and course templates.

Responsibility:
    Creates trainers and recurring courses and maintains a course's default
    trainer set and active flag.  None of these writes touch the ledger:
    the default trainers are a display fallback only, and the active flag
    does not change whether past or future instances occur.

Architecture position:
    Kernel > Services.
"""

from datetime import time
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from trainer_kernel.domain.calendar import parse_weekday
from trainer_kernel.domain.duration import validate_time_range
from trainer_kernel.exceptions import CourseNotFoundError, UnknownTrainerError
from trainer_kernel.logging_config import get_logger
from trainer_kernel.models.course import CourseTemplate
from trainer_kernel.models.trainer import Trainer
from trainer_kernel.services.base import BaseService

logger = get_logger("services.master_data")


class MasterDataService(BaseService):
    """Course and trainer master data."""

    def create_trainer(
        self,
        first_name: str,
        last_name: str,
        email: str | None = None,
        phone: str | None = None,
    ) -> int:
        with self._unit_of_work("create_trainer"):
            trainer = Trainer(
                first_name=first_name,
                last_name=last_name,
                email=email,
                phone=phone,
            )
            self.session.add(trainer)
            self.session.flush()
            trainer_id = trainer.id
            logger.info("trainer_created", extra={"trainer_id": trainer_id})
        return trainer_id

    def create_course(
        self,
        name: str,
        weekday: int | str,
        start_time: time | None,
        end_time: time | None,
        location: str | None = None,
        category: str | None = None,
        required_trainers: int = 1,
        default_trainer_ids: Iterable[int] = (),
    ) -> int:
        """
        Create a weekly course.

        ``weekday`` is Mon=0 .. Sun=6 or a German / English day name.

        Raises:
            InvalidWeekdayError: Unknown weekday.
            InvalidTimeRangeError: end_time not after start_time.
            UnknownTrainerError: Unknown default trainer id.
            ValueError: Negative required_trainers.
        """
        weekday_idx = parse_weekday(weekday)
        if start_time is not None and end_time is not None:
            validate_time_range(start_time, end_time)
        if required_trainers < 0:
            raise ValueError(f"required_trainers must be >= 0, got {required_trainers}")

        with self._unit_of_work("create_course"):
            course = CourseTemplate(
                name=name,
                weekday=weekday_idx,
                start_time=start_time,
                end_time=end_time,
                location=location,
                category=category,
                required_trainers=required_trainers,
                is_active=True,
            )
            course.default_trainers = self._load_trainers(default_trainer_ids)
            self.session.add(course)
            self.session.flush()
            course_id = course.id
            logger.info(
                "course_created",
                extra={"course_id": course_id, "weekday": weekday_idx, "course_name": name},
            )
        return course_id

    def set_default_trainers(self, course_id: int, trainer_ids: Iterable[int]) -> None:
        with self._unit_of_work("set_default_trainers"):
            course = self._get_course(course_id)
            course.default_trainers = self._load_trainers(trainer_ids)
            logger.info(
                "default_trainers_set",
                extra={"course_id": course_id, "trainer_ids": [t.id for t in course.default_trainers]},
            )

    def deactivate_course(self, course_id: int) -> None:
        self._set_active(course_id, False)

    def activate_course(self, course_id: int) -> None:
        self._set_active(course_id, True)

    def _set_active(self, course_id: int, active: bool) -> None:
        with self._unit_of_work("set_course_active"):
            course = self._get_course(course_id)
            course.is_active = active
            logger.info("course_active_changed", extra={"course_id": course_id, "is_active": active})

    def _get_course(self, course_id: int) -> CourseTemplate:
        course = self.session.get(CourseTemplate, course_id)
        if course is None:
            raise CourseNotFoundError(course_id)
        return course

    def _load_trainers(self, trainer_ids: Iterable[int]) -> list[Trainer]:
        wanted = sorted(set(trainer_ids))
        if not wanted:
            return []
        trainers = list(
            self.session.execute(
                select(Trainer).where(Trainer.id.in_(wanted)).order_by(Trainer.id)
            ).scalars()
        )
        missing = set(wanted) - {t.id for t in trainers}
        if missing:
            raise UnknownTrainerError(sorted(missing))
        return trainers
