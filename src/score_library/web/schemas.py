from pydantic import BaseModel
from typing import Optional


class WorkInfo(BaseModel):
    id: str
    composer_id: str
    title: str
    edition: str = ""
    year: str = ""
    file_url: str = ""


class RecordingInfo(BaseModel):
    id: str
    composer_id: str
    title: str
    performer: str = ""
    duration: str = ""
    year: str = ""
    file_url: str = ""


class ComposerSummary(BaseModel):
    id: str
    name: str
    period: str = ""
    image: str = ""  # file:// URI locally, public URL remotely
    sheet_music_count: int
    recording_count: int


class ComposerDetail(ComposerSummary):
    works: list[WorkInfo]
    recordings: list[RecordingInfo]


class StepInfo(BaseModel):
    kind: str
    entity_id: str
    outcome: str
    destination_id: Optional[str] = None
    reason: Optional[str] = None


class JobInfo(BaseModel):
    id: str
    direction: str  # "push" or "pull"
    source_composer_id: str
    status: str  # "running", "done" or "error"
    progress: int  # 0-100, last value reported by the sync engine
    destination_composer_id: Optional[str] = None
    failures: list[StepInfo] = []
    error: Optional[str] = None


class JobStarted(BaseModel):
    job_id: str
    status: str
