# tests/services/api/test_analysis_api.py
from __future__ import annotations

from typing import Any, Dict

import pytest
from starlette.testclient import TestClient

from mediafocus.services.api.app import create_app


@pytest.fixture()
def api_client():
    with TestClient(create_app()) as client:
        yield client


@pytest.fixture()
def payload(sample_header, make_showinfo_line):
    def _payload(**overrides: Any) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "file": {
                "name": "clip.mp4",
                "size_bytes": 47_185_920,
                "mime_type": "video/mp4",
                "last_modified_epoch_ms": 1_700_000_000_000,
            },
            "text": sample_header,
            "lines": [make_showinfo_line(n, frame_type="I" if n % 48 == 0 else "P") for n in range(120)],
        }
        body.update(overrides)
        return body

    return _payload


def test_healthz(api_client):
    r = api_client.get("/healthz")
    assert r.status_code == 200, r.text
    assert r.json()["ok"] is True


def test_parse_returns_full_analysis(api_client, payload):
    r = api_client.post("/api/analysis/parse", json=payload())
    assert r.status_code == 200, r.text
    data = r.json()

    md = data["metadata"]
    assert md["duration_seconds"] == 90.5
    assert md["formatted_duration"] == "1:30"
    assert md["formatted_file_size"] == "45 MB"
    assert md["video"]["codec"] == "h264"
    assert md["video"]["resolution"] == "1920x1080"
    assert md["video"]["aspect_ratio"] == "16:9"
    assert md["audio"]["channel_count"] == 2

    assert data["frame_count"] == 120
    assert data["frames"][0]["frame_type"] == "I"
    assert data["frames"][0]["is_key_frame"] is True

    analytics = data["analytics"]
    assert analytics["frame_rate_used"] == 24.0
    assert analytics["key_frame_intervals"] == [48, 48]
    assert analytics["av_sync"]["computed"] is False
    assert analytics["av_sync"]["offsets_ms"] is None
    assert analytics["av_sync"]["reason"]

    assert data["progress"][-1]["percent"] == 100
    assert all(p["percent"] <= 99 for p in data["progress"][:-1])
    assert data["report"]["exit_status"] == "success"


def test_parse_empty_capture(api_client, payload):
    r = api_client.post("/api/analysis/parse", json=payload(text=None, lines=[]))
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["frames"] == []
    assert data["metadata"]["file_name"] == "clip.mp4"
    assert data["metadata"]["duration_seconds"] is None
    assert data["report"]["degraded"] is True


def test_non_zero_return_code_marks_failure(api_client, payload):
    r = api_client.post("/api/analysis/parse", json=payload(return_code=1))
    assert r.status_code == 200, r.text
    assert r.json()["report"]["exit_status"] == "failure"
    assert r.json()["frame_count"] == 120


def test_metadata_only(api_client, payload):
    r = api_client.post("/api/analysis/metadata", json=payload(lines=[]))
    assert r.status_code == 200, r.text
    assert r.json()["container_format"] == "mov,mp4,m4a,3gp,3g2,mj2"
    assert r.json()["title"] == "Big Buck Bunny"


def test_frames_are_paged(api_client, payload):
    r = api_client.post("/api/analysis/frames", params={"page": 2, "page_size": 50}, json=payload())
    assert r.status_code == 200, r.text
    page = r.json()
    assert page["total_frames"] == 120
    assert page["total_pages"] == 3
    assert [f["frame_number"] for f in page["items"]] == list(range(50, 100))
    assert page["items"][0]["layout_bucket"] == 50


def test_frames_default_page_size(api_client, payload):
    r = api_client.post("/api/analysis/frames", json=payload())
    assert r.status_code == 200, r.text
    assert r.json()["page_size"] == 50
    assert len(r.json()["items"]) == 50


def test_bad_request_is_rejected(api_client, payload):
    r = api_client.post("/api/analysis/parse", json={"text": "Duration: 00:00:01.00"})
    assert r.status_code == 422
    r = api_client.post("/api/analysis/frames", params={"page": 0}, json=payload())
    assert r.status_code == 422
