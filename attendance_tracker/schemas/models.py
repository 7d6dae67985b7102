"""
Pydantic Models for webhook payloads, page state and API output.
"""
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List

ALL = "all"


class AttendanceStatus(str, Enum):
    PRESENT = "Present"
    ABSENT = "Absent"
    LATE = "Late"

    def next(self) -> "AttendanceStatus":
        """Present -> Absent -> Late -> Present."""
        return _STATUS_CYCLE[self]


_STATUS_CYCLE = {
    AttendanceStatus.PRESENT: AttendanceStatus.ABSENT,
    AttendanceStatus.ABSENT: AttendanceStatus.LATE,
    AttendanceStatus.LATE: AttendanceStatus.PRESENT,
}


class FilterSelection(BaseModel):
    teacher: str = ALL
    level: str = ALL

    @field_validator('teacher', 'level', mode='before')
    @classmethod
    def default_to_all(cls, v):
        if v is None:
            return ALL
        v = str(v).strip()
        return v or ALL

    @property
    def is_concrete(self) -> bool:
        return self.teacher != ALL and self.level != ALL

    def as_query(self) -> dict:
        return {"teacher": self.teacher, "level": self.level}


class FilterOptions(BaseModel):
    teachers: List[str]
    levels: List[str]


class StudentStatus(BaseModel):
    name: str
    status: AttendanceStatus


class SubmissionPayload(BaseModel):
    """Body of the submit_attendance POST. Serialize with by_alias=True."""
    model_config = ConfigDict(populate_by_name=True)

    action: str = "submit_attendance"
    teacher: str
    level: str
    session: str = Field(..., min_length=1)
    timestamp: str
    students: List[StudentStatus]
    total_students: int = Field(..., alias="totalStudents")
    present_count: int = Field(..., alias="presentCount")
    absent_count: int = Field(..., alias="absentCount")
    late_count: int = Field(..., alias="lateCount")

    def to_body(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class OperationResult(BaseModel):
    ok: bool
    message: str = ""
    error_code: Optional[str] = None


class GroundingSource(BaseModel):
    uri: str
    title: str


class SearchResult(BaseModel):
    text: str
    sources: List[GroundingSource] = []
