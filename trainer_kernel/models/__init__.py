"""Domain models for the trainer kernel."""

from trainer_kernel.models.course import CourseTemplate, course_trainers
from trainer_kernel.models.schedule import (
    DEFAULT_CANCELLATION_REASON,
    CancelledCourse,
    CourseException,
    HolidayWeek,
    WeeklyAssignment,
)
from trainer_kernel.models.trainer import Trainer
from trainer_kernel.models.training_session import TrainingSession

__all__ = [
    "CourseTemplate",
    "course_trainers",
    "Trainer",
    "WeeklyAssignment",
    "CancelledCourse",
    "HolidayWeek",
    "CourseException",
    "DEFAULT_CANCELLATION_REASON",
    "TrainingSession",
]
