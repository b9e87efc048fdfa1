"""Learning Schemas — lesson progress request bodies (camelCase over the wire)."""

from pydantic import BaseModel, ConfigDict, Field


class LessonRef(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    course_slug: str = Field(alias="courseSlug", min_length=1, max_length=200)
    lesson_slug: str = Field(alias="lessonSlug", min_length=1, max_length=200)


class TimeSpentUpdate(LessonRef):
    time_spent_seconds: int = Field(alias="timeSpentSeconds")


class ReadingProgressUpdate(LessonRef):
    percentage: float
