"""
Data models for the Watson Image Tagger service.
"""

from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field


# Raw Watson Visual Recognition payloads

class GeneralClass(BaseModel):
    """A single class from Watson's general classifier."""
    label: str = Field(alias="class")
    score: float
    type_hierarchy: Optional[str] = None


class Classifier(BaseModel):
    """One classifier run over an image."""
    classifier_id: Optional[str] = None
    name: Optional[str] = None
    classes: List[GeneralClass]


class GeneralImage(BaseModel):
    """Classification result for one image."""
    classifiers: List[Any]  # Only the first run is read
    source_url: Optional[str] = None
    resolved_url: Optional[str] = None


class GeneralResult(BaseModel):
    """Response of the classify endpoint."""
    images: List[Any]  # Only the first image is read
    images_processed: Optional[int] = None


class Gender(BaseModel):
    """Estimated gender of a detected face."""
    gender_label: str
    score: float
    gender: Optional[str] = None


class AgeRange(BaseModel):
    """Estimated age range of a detected face (either bound may be missing)."""
    min: Optional[int] = None
    max: Optional[int] = None
    score: float


class FaceRecord(BaseModel):
    """A single detected face."""
    gender: Optional[Gender] = None
    age: Optional[AgeRange] = None
    face_location: Any = None  # Passed through untouched


class FaceImage(BaseModel):
    """Face detection result for one image."""
    faces: List[Any]  # Counted; read only when there is exactly one
    source_url: Optional[str] = None
    resolved_url: Optional[str] = None


class FaceResult(BaseModel):
    """Response of the detect_faces endpoint."""
    images: List[Any]  # Only the first image is read
    images_processed: Optional[int] = None


class RawClassificationResult(BaseModel):
    """Both Watson results for a single image."""
    general: GeneralResult
    faces: FaceResult


# Extraction output

class TagCandidate(BaseModel):
    """A label with its confidence score."""
    label: str
    score: float


class AgeData(BaseModel):
    """Age range kept alongside the tags."""
    min: Optional[int] = None
    max: Optional[int] = None


class ExtractionData(BaseModel):
    """Face metadata; only fields that were actually set get serialized."""
    model_config = ConfigDict(populate_by_name=True)

    age: Optional[AgeData] = None
    face_location: Any = Field(default=None, alias="faceLocation")


class ExtractionResult(BaseModel):
    """Ranked tags plus face metadata for one image."""
    tags: List[TagCandidate] = []
    data: ExtractionData = Field(default_factory=ExtractionData)

    def to_response(self) -> Dict[str, Any]:
        """JSON body returned by the /api/image route."""
        return {
            "tags": [tag.model_dump() for tag in self.tags],
            "data": self.data.model_dump(by_alias=True, exclude_unset=True),
        }


# HTTP layer

class ImageAnalysisRequest(BaseModel):
    """Body of POST /api/image."""
    imageUrl: Optional[str] = None


class HealthStatus(BaseModel):
    """Health check response."""
    status: str = "healthy"
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    version: str = "1.0.0"
    metrics: Dict[str, Any] = {}
