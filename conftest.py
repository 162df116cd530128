"""
Shared pytest fixtures for the Watson Image Tagger tests.
"""

import pytest

from watson_tagger.performance_monitor import performance_monitor
from watson_tagger.watson_client import BaseImageAnalyzer, WatsonAPIError


def build_raw_result(classes, faces):
    """Build a raw two-part Watson result from (label, score) pairs and face records."""
    return {
        "general": {
            "images": [{
                "classifiers": [{
                    "classifier_id": "default",
                    "name": "default",
                    "classes": [{"class": label, "score": score} for label, score in classes],
                }],
                "source_url": "https://example.com/image.jpg",
                "resolved_url": "https://example.com/image.jpg",
            }],
            "images_processed": 1,
        },
        "faces": {
            "images": [{
                "faces": faces,
                "source_url": "https://example.com/image.jpg",
            }],
            "images_processed": 1,
        },
    }


def single_face(gender=None, age=None, face_location=None):
    face = {"face_location": face_location or {"left": 1, "top": 2, "width": 3, "height": 4}}
    if gender is not None:
        face["gender"] = {"gender": gender[0].upper(), "gender_label": gender[0], "score": gender[1]}
    if age is not None:
        face["age"] = {"min": age[0], "max": age[1], "score": age[2]}
    return face


class FakeAnalyzer(BaseImageAnalyzer):
    """Analyzer returning a canned result (or raising) without network access."""

    def __init__(self, raw=None, error=None, connection_ok=True):
        self.raw = raw
        self.error = error
        self.connection_ok = connection_ok
        self.calls = []
        self.closed = False

    async def analyze(self, image_url):
        self.calls.append(image_url)
        if self.error is not None:
            raise self.error
        return self.raw

    async def test_connection(self):
        return self.connection_ok

    async def close(self):
        self.closed = True


@pytest.fixture
def raw_result():
    return build_raw_result


@pytest.fixture
def cat_result():
    return build_raw_result([("cat", 0.9), ("dog", 0.5)], [])


@pytest.fixture
def fake_analyzer_cls():
    return FakeAnalyzer


@pytest.fixture
def upstream_error():
    return WatsonAPIError("HTTP 503: unavailable")


@pytest.fixture(autouse=True)
def reset_performance_monitor():
    performance_monitor.reset()
    yield
    performance_monitor.reset()


@pytest.fixture
def face_record():
    return single_face
