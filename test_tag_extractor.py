"""
Tests for turning raw Watson results into ranked tags.
"""

import copy

import pytest

from watson_tagger.models import RawClassificationResult
from watson_tagger.tag_extractor import (
    MAX_TAGS,
    ExtractionError,
    MalformedInputError,
    extract,
)


def labels(result):
    return [tag.label for tag in result.tags]


def pairs(result):
    return [(tag.label, tag.score) for tag in result.tags]


def test_general_classes_only(cat_result):
    result = extract(cat_result)

    assert pairs(result) == [("cat", 0.9), ("dog", 0.5)]
    assert result.to_response() == {
        "tags": [{"label": "cat", "score": 0.9}, {"label": "dog", "score": 0.5}],
        "data": {},
    }


def test_single_face_adds_gender_age_and_location(raw_result, face_record):
    raw = raw_result(
        [("person", 0.8)],
        [face_record(gender=("female", 0.7), age=(20, 30, 0.6))],
    )

    result = extract(raw)

    assert pairs(result) == [("person", 0.8), ("female", 0.7), ("age: 20-30", 0.6)]
    assert result.to_response()["data"] == {
        "age": {"min": 20, "max": 30},
        "faceLocation": {"left": 1, "top": 2, "width": 3, "height": 4},
    }


def test_multiple_faces_adds_one_tag_and_no_metadata(raw_result, face_record):
    faces = [
        face_record(gender=("male", 0.99), age=(40, 50, 0.99)),
        face_record(gender=("female", 0.98)),
        face_record(),
    ]
    raw = raw_result([("crowd", 0.95), ("people", 0.6)], faces)

    result = extract(raw)

    assert pairs(result) == [("multiple faces", 1), ("crowd", 0.95), ("people", 0.6)]
    assert labels(result).count("multiple faces") == 1
    assert not any(label in ("male", "female") or label.startswith("age:") for label in labels(result))
    assert result.to_response()["data"] == {}


def test_two_faces_count_as_multiple(raw_result, face_record):
    result = extract(raw_result([], [face_record(), face_record()]))

    assert pairs(result) == [("multiple faces", 1)]


def test_truncates_to_seven_tags(raw_result):
    classes = [(f"class{i}", round(i / 10, 1)) for i in range(1, 9)]

    result = extract(raw_result(classes, []))

    assert len(result.tags) == 7
    assert labels(result) == [f"class{i}" for i in range(8, 1, -1)]


def test_seven_tags_are_kept(raw_result):
    classes = [(f"class{i}", i / 10) for i in range(1, 8)]

    result = extract(raw_result(classes, []))

    assert len(result.tags) == 7


def test_short_lists_are_not_truncated(raw_result):
    classes = [(f"class{i}", i / 10) for i in range(1, 6)]

    result = extract(raw_result(classes, []))

    assert len(result.tags) == 5


def test_metadata_survives_truncation(raw_result, face_record):
    classes = [(f"class{i}", 0.9) for i in range(10)]
    raw = raw_result(classes, [face_record(gender=("male", 0.1), age=(1, 2, 0.1))])

    result = extract(raw)

    assert len(result.tags) == MAX_TAGS
    assert "male" not in labels(result)
    assert result.to_response()["data"]["age"] == {"min": 1, "max": 2}
    assert "faceLocation" in result.to_response()["data"]


def test_ties_are_ordered_by_label(raw_result, face_record):
    raw = raw_result(
        [("zebra", 0.5), ("apple", 1), ("mango", 0.5), ("banana", 0.5)],
        [face_record(), face_record()],
    )

    result = extract(raw)

    assert labels(result) == ["apple", "multiple faces", "banana", "mango", "zebra"]


def test_duplicate_labels_are_kept(raw_result, face_record):
    raw = raw_result([("female", 0.7), ("woman", 0.6)], [face_record(gender=("female", 0.7))])

    result = extract(raw)

    assert pairs(result) == [("female", 0.7), ("female", 0.7), ("woman", 0.6)]


@pytest.mark.parametrize("classes", [
    [("b", 0.3), ("a", 0.3), ("c", 0.9), ("a", 0.3), ("d", 0.0), ("e", 0.31)],
    [(f"tag{i % 4}", (i % 3) / 3) for i in range(20)],
    [],
])
def test_tags_are_sorted_and_bounded(raw_result, face_record, classes):
    raw = raw_result(classes, [face_record(gender=("male", 0.3), age=(10, 15, 0.3))])

    result = extract(raw)

    assert len(result.tags) <= 7
    for current, following in zip(result.tags, result.tags[1:]):
        assert current.score >= following.score
        if current.score == following.score:
            assert current.label <= following.label


def test_single_face_without_gender_or_age(raw_result, face_record):
    result = extract(raw_result([("portrait", 0.4)], [face_record()]))

    assert pairs(result) == [("portrait", 0.4)]
    assert result.to_response()["data"] == {
        "faceLocation": {"left": 1, "top": 2, "width": 3, "height": 4},
    }


def test_single_face_with_gender_only(raw_result, face_record):
    result = extract(raw_result([], [face_record(gender=("male", 0.9))]))

    assert pairs(result) == [("male", 0.9)]
    assert "age" not in result.to_response()["data"]


def test_face_location_passed_through_when_missing(raw_result):
    result = extract(raw_result([], [{"age": {"min": 5, "max": 9, "score": 0.2}}]))

    data = result.to_response()["data"]
    assert data == {"age": {"min": 5, "max": 9}, "faceLocation": None}


def test_null_gender_is_treated_as_absent(raw_result):
    result = extract(raw_result([("tree", 0.5)], [{"gender": None, "face_location": [1, 2]}]))

    assert pairs(result) == [("tree", 0.5)]
    assert result.to_response()["data"] == {"faceLocation": [1, 2]}


def test_open_ended_age_range(raw_result):
    raw = raw_result([], [{"age": {"min": 65, "score": 0.3}, "face_location": {}}])

    result = extract(raw)

    assert pairs(result) == [("age: 65-", 0.3)]
    assert result.to_response()["data"]["age"] == {"min": 65, "max": None}


def test_no_faces_means_no_face_data(cat_result):
    result = extract(cat_result)

    assert result.to_response()["data"] == {}
    assert result.data.age is None


def test_extra_watson_fields_are_ignored(cat_result):
    raw = copy.deepcopy(cat_result)
    raw["general"]["images"][0]["classifiers"][0]["classes"][0]["type_hierarchy"] = "/animal/cat"
    raw["general"]["custom_classes"] = 0
    raw["faces"]["images"][0]["error"] = None

    assert labels(extract(raw)) == ["cat", "dog"]


def test_face_attributes_are_not_read_for_multiple_faces(raw_result):
    faces = [
        {"gender": {"gender": "MALE", "score": 0.9}},
        {"face_location": {}},
    ]

    result = extract(raw_result([("crowd", 0.8)], faces))

    assert labels(result) == ["multiple faces", "crowd"]
    assert result.to_response()["data"] == {}


def test_later_images_are_ignored(cat_result):
    raw = copy.deepcopy(cat_result)
    raw["general"]["images"].append({"error": {"code": 400, "description": "Image too large"}})
    raw["faces"]["images"].append({"error": {"code": 400, "description": "Image too large"}})

    assert labels(extract(raw)) == ["cat", "dog"]


def test_later_classifier_runs_are_ignored(cat_result):
    raw = copy.deepcopy(cat_result)
    raw["general"]["images"][0]["classifiers"].append({"classifier_id": "food"})

    assert labels(extract(raw)) == ["cat", "dog"]


def test_broken_single_face_is_malformed(raw_result):
    raw = raw_result([("cat", 0.9)], [{"gender": {"gender": "MALE", "score": 0.9}}])

    with pytest.raises(MalformedInputError):
        extract(raw)


def test_accepts_parsed_result(cat_result):
    parsed = RawClassificationResult.model_validate(cat_result)

    assert pairs(extract(parsed)) == [("cat", 0.9), ("dog", 0.5)]


def test_input_is_not_modified(raw_result, face_record):
    raw = raw_result([("b", 0.1), ("a", 0.9)], [face_record(gender=("male", 0.5))])
    snapshot = copy.deepcopy(raw)

    extract(raw)

    assert raw == snapshot


def _drop(path):
    def mutate(raw):
        target = raw
        for key in path[:-1]:
            target = target[key]
        del target[path[-1]]
    return mutate


def _empty(path):
    def mutate(raw):
        target = raw
        for key in path[:-1]:
            target = target[key]
        target[path[-1]] = []
    return mutate


@pytest.mark.parametrize("mutate", [
    _drop(["general"]),
    _drop(["general", "images"]),
    _empty(["general", "images"]),
    _drop(["general", "images", 0, "classifiers"]),
    _empty(["general", "images", 0, "classifiers"]),
    _drop(["general", "images", 0, "classifiers", 0, "classes"]),
    _drop(["faces"]),
    _drop(["faces", "images"]),
    _empty(["faces", "images"]),
    _drop(["faces", "images", 0, "faces"]),
])
def test_malformed_input_raises(cat_result, mutate):
    raw = copy.deepcopy(cat_result)
    mutate(raw)

    with pytest.raises(MalformedInputError):
        extract(raw)


@pytest.mark.parametrize("raw", [None, [], "not a result", {"general": None, "faces": None}])
def test_non_mapping_input_raises(raw):
    with pytest.raises(ExtractionError):
        extract(raw)


def test_class_without_score_is_malformed(raw_result):
    raw = raw_result([], [])
    raw["general"]["images"][0]["classifiers"][0]["classes"] = [{"class": "cat"}]

    with pytest.raises(MalformedInputError):
        extract(raw)
