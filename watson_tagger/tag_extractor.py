"""
Tag extraction from raw Watson Visual Recognition results.

Turns the general classifier and face detection results for one image into a
short, score-ranked list of tags, plus the age range and face location of a
single detected face.
"""

from typing import Any, List, Mapping, Union
from pydantic import ValidationError
from .models import (
    AgeData,
    AgeRange,
    Classifier,
    ExtractionData,
    ExtractionResult,
    FaceImage,
    FaceRecord,
    GeneralClass,
    GeneralImage,
    RawClassificationResult,
    TagCandidate,
)

MULTIPLE_FACES_LABEL = "multiple faces"
MULTIPLE_FACES_SCORE = 1

# More than TRUNCATE_THRESHOLD tags are cut down to MAX_TAGS.
TRUNCATE_THRESHOLD = 6
MAX_TAGS = 7


class ExtractionError(Exception):
    """Base exception for tag extraction errors."""
    pass


class MalformedInputError(ExtractionError):
    """The Watson result does not have the expected nested shape."""
    pass


def extract(raw: Union[RawClassificationResult, Mapping[str, Any]]) -> ExtractionResult:
    """Build the ranked tag list and face metadata for one image.

    Only the first image of each result and the first classifier run are
    looked at. Raises MalformedInputError if either path is missing.
    """
    result = _validate(RawClassificationResult, raw, "top level")
    classes = _general_classes(result)
    faces = _faces(result)

    tags = [TagCandidate(label=cls.label, score=cls.score) for cls in classes]
    face_tags, data = _face_tags(faces)
    tags.extend(face_tags)

    tags.sort(key=_rank_key)
    if len(tags) > TRUNCATE_THRESHOLD:
        tags = tags[:MAX_TAGS]

    return ExtractionResult(tags=tags, data=data)


def _validate(model, value, where: str):
    try:
        return model.model_validate(value)
    except ValidationError as e:
        raise MalformedInputError(f"Unexpected shape at {where}: {e}") from e


def _general_classes(result: RawClassificationResult) -> List[GeneralClass]:
    if not result.general.images:
        raise MalformedInputError("General result has no images")
    image = _validate(GeneralImage, result.general.images[0], "general.images[0]")
    if not image.classifiers:
        raise MalformedInputError("General result has no classifiers")
    classifier = _validate(Classifier, image.classifiers[0], "general.images[0].classifiers[0]")
    return classifier.classes


def _faces(result: RawClassificationResult) -> List[Any]:
    if not result.faces.images:
        raise MalformedInputError("Face result has no images")
    return _validate(FaceImage, result.faces.images[0], "faces.images[0]").faces


def _face_tags(faces: List[Any]):
    """Synthetic tags and metadata derived from face detection."""
    tags: List[TagCandidate] = []
    data = {}

    if len(faces) > 1:
        tags.append(TagCandidate(label=MULTIPLE_FACES_LABEL, score=MULTIPLE_FACES_SCORE))
    elif len(faces) == 1:
        face = _validate(FaceRecord, faces[0], "faces.images[0].faces[0]")
        if face.gender is not None:
            tags.append(TagCandidate(label=face.gender.gender_label, score=face.gender.score))
        if face.age is not None:
            tags.append(TagCandidate(label=_age_label(face.age), score=face.age.score))
            data["age"] = AgeData(min=face.age.min, max=face.age.max)
        data["face_location"] = face.face_location

    return tags, ExtractionData(**data)


def _age_label(age: AgeRange) -> str:
    low = "" if age.min is None else age.min
    high = "" if age.max is None else age.max
    return f"age: {low}-{high}"


def _rank_key(tag: TagCandidate):
    # Highest score first, then alphabetical
    return (-tag.score, tag.label)
