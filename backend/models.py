#file: backend/models.py

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from typing import Dict, List, Optional

MAX_HISTORY = 50
MAX_LABEL_LENGTH = 100


def utf16_length(text: str) -> int:
    """Length in UTF-16 code units, the way browsers count characters."""
    return len(text.encode("utf-16-le", "surrogatepass")) // 2


class ThresholdTier(BaseModel):
    model_config = ConfigDict(frozen=True)

    max: float = Field(..., description="Inclusive upper bound of the tier")
    label: str = Field(..., description="Human readable tier name")
    color: str = Field(..., description="Display color token")
    advice: Optional[str] = Field(None, description="Advisory text for the tier")


class ClassificationResult(BaseModel):
    metric: str = Field(..., description="Metric key the value was classified for")
    value: float = Field(..., description="Parsed numeric value")
    rank: int = Field(..., ge=0, description="Position of the matched tier (0 = best)")
    tier: ThresholdTier


class Reading(BaseModel):
    id: str = Field(..., min_length=1, description="Unique identifier of the reading")
    data: Dict[str, str] = Field(..., description="Metric key -> raw value as captured")
    room: str = Field("", description="Free text room label")
    timestamp: int = Field(..., description="Creation time in epoch milliseconds")
    time: Optional[str] = Field(None, description="Display time derived from timestamp")
    date: Optional[str] = Field(None, description="Display date derived from timestamp")


class SharePayload(BaseModel):
    label: str = Field(..., min_length=1, description="Share label")
    readings: List[Reading] = Field(..., min_length=1, max_length=MAX_HISTORY)

    @field_validator("label")
    @classmethod
    def label_fits(cls, label: str) -> str:
        if utf16_length(label) > MAX_LABEL_LENGTH:
            raise ValueError(f"label longer than {MAX_LABEL_LENGTH} characters")
        return label


class ReportText(BaseModel):
    text: str = Field(..., description="Console dump copied from the sensor web page")


class ParsedReport(BaseModel):
    data: Dict[str, str]


class NewReading(BaseModel):
    data: Dict[str, str] = Field(..., description="Metric key -> raw value")
    room: str = Field("", description="Room label")


class SaveResult(BaseModel):
    reading: Reading
    history_size: int
    saved: bool
    message: str = ""


class ShareCreated(BaseModel):
    id: str
    url: str


class Delta(BaseModel):
    percent_change: float
    absolute_diff: float
    previous: float
    increased: bool
    is_worse: bool

    @computed_field
    @property
    def direction(self) -> str:
        return "up" if self.increased else "down"


class Verdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    color: str
    icon: str
    message: str


class Tip(BaseModel):
    icon: str = ""
    text: str
    indent: bool = False


class Assessment(BaseModel):
    severity: int = Field(..., ge=0, description="Worst tier rank across classified metrics")
    verdict: Verdict
    tips: List[Tip]


class ParticleSegment(BaseModel):
    label: str
    value: float
    percent: float
    color: str


class ParticleBreakdown(BaseModel):
    segments: List[ParticleSegment]
    signature: str


class GuidelineRatio(BaseModel):
    label: str
    value: float
    limit: float
    unit: str

    @computed_field
    @property
    def ratio(self) -> float:
        return self.value / self.limit

    @computed_field
    @property
    def exceeded(self) -> bool:
        return self.ratio > 1


class SignalInfo(BaseModel):
    bars: int = Field(..., ge=1, le=4)
    label: str
    color: str


class VocQualityInfo(BaseModel):
    label: str
    color: str
    hint: str = ""


class ReadingAnalysis(BaseModel):
    reading: Reading
    baseline_id: Optional[str] = None
    classifications: Dict[str, ClassificationResult]
    deltas: Dict[str, Delta]
    assessment: Assessment
    particles: Optional[ParticleBreakdown] = None
    guidelines: List[GuidelineRatio] = []
    signal: Optional[SignalInfo] = None
    voc_quality: Optional[VocQualityInfo] = None
