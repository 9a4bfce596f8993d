"""
POSTURECOACH - API endpoint tests

TestClient is used without a context manager so the application lifespan
(which shuts the global worker pools down) never runs.
"""

import asyncio
import base64
import io

import cv2
import numpy as np
import pytest
from fastapi import UploadFile
from fastapi.testclient import TestClient

import shared.storage
from main import app
from posture_service.models import BodyLandmark, SyntheticPoseDetector
from posture_service.router import read_upload
from shared.storage import UploadRejected, UploadStore

client = TestClient(app)


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    store = UploadStore(base_path=str(tmp_path / "uploads"))
    monkeypatch.setattr(shared.storage, "_store_instance", store)
    return store.base_path


@pytest.fixture
def synthetic(use_detector):
    return use_detector(SyntheticPoseDetector(seed=42))


def encode_png(image, data_url=False):
    ok, buf = cv2.imencode(".png", image)
    assert ok
    payload = base64.b64encode(buf.tobytes()).decode()
    return f"data:image/png;base64,{payload}" if data_url else payload


def avi_bytes(tmp_path, count=8):
    path = tmp_path / "upload-source.avi"
    writer = cv2.VideoWriter(str(path), cv2.VideoWriter_fourcc(*"MJPG"), 10.0, (32, 32))
    if not writer.isOpened():
        pytest.skip("OpenCV build cannot write MJPG video")
    for i in range(count):
        writer.write(np.full((32, 32, 3), i * 20, np.uint8))
    writer.release()
    return path.read_bytes()


# ═══════════════════════════════════════════════════════════════════════════════
# HEALTH
# ═══════════════════════════════════════════════════════════════════════════════

def test_health():
    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "Server is running"
    assert "timestamp" in body
    assert "X-Process-Time-Ms" in response.headers


def test_stats(synthetic):
    body = client.get("/api/stats").json()

    assert body["pose_detector"] == "synthetic"
    assert body["video_pool"]["name"] == "video_analysis"
    assert body["frame_pool"]["name"] == "frame_analysis"


# ═══════════════════════════════════════════════════════════════════════════════
# LANDMARK ANALYSIS
# ═══════════════════════════════════════════════════════════════════════════════

def test_analyze_landmarks(desk_good):
    response = client.post("/api/analyze-landmarks", json={
        "landmarks": [lm.to_dict() for lm in desk_good],
        "analysis_type": "desk",
    })

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["analysis"]["score"] == 100
    assert body["analysis"]["issues"] == []


def test_analyze_landmarks_squat_issues(squat_knee_and_back):
    body = client.post("/api/analyze-landmarks", json={
        "landmarks": [lm.to_dict() for lm in squat_knee_and_back],
        "analysis_type": "squat",
    }).json()

    assert body["analysis"]["issues"] == ["knee_over_toe", "back_angle_poor"]
    assert body["analysis"]["score"] == 50


def test_analyze_landmarks_not_detected():
    body = client.post("/api/analyze-landmarks", json={
        "landmarks": [],
        "detected": False,
        "analysis_type": "squat",
    }).json()

    assert body == {"success": False, "analysis_type": "squat", "error": "No pose detected in frame"}


def test_analyze_landmarks_invalid_type(squat_good):
    body = client.post("/api/analyze-landmarks", json={
        "landmarks": [lm.to_dict() for lm in squat_good],
        "analysis_type": "yoga",
    }).json()

    assert body["success"] is False
    assert body["error"].startswith("Invalid analysis type")


def test_analyze_landmarks_malformed():
    body = client.post("/api/analyze-landmarks", json={
        "landmarks": [{"x": 0.5, "y": 0.5}, None],
        "analysis_type": "desk",
    }).json()

    assert body["success"] is True
    assert body["analysis"]["issues"] == ["analysis_error"]
    assert body["analysis"]["score"] == 80


def test_analyze_landmarks_oversized_coordinate(squat_good):
    landmarks = [lm.to_dict() for lm in squat_good]
    landmarks[BodyLandmark.LEFT_KNEE.value] = {"x": 10 ** 400, "y": 0.5}

    body = client.post("/api/analyze-landmarks", json={
        "landmarks": landmarks,
        "analysis_type": "squat",
    }).json()

    assert body["success"] is True
    assert body["analysis"]["issues"] == ["analysis_error"]
    assert body["analysis"]["score"] == 75


def test_analyze_landmarks_requires_type():
    response = client.post("/api/analyze-landmarks", json={"landmarks": []})
    assert response.status_code == 422


# ═══════════════════════════════════════════════════════════════════════════════
# VIDEO UPLOAD
# ═══════════════════════════════════════════════════════════════════════════════

def test_upload_without_file(upload_dir):
    response = client.post("/api/upload-video", data={"analysis_type": "squat"})

    assert response.status_code == 400
    assert response.json()["detail"] == {"success": False, "error": "No video file uploaded"}


def test_upload_rejects_non_video(upload_dir):
    response = client.post(
        "/api/upload-video",
        files={"video": ("notes.txt", b"hello", "text/plain")},
        data={"analysis_type": "squat"},
    )

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "Only video files are allowed!"
    assert list(upload_dir.iterdir()) == []


def test_upload_unreadable_video(upload_dir):
    response = client.post(
        "/api/upload-video",
        files={"video": ("clip.mp4", b"not really a video", "video/mp4")},
        data={"analysis_type": "squat"},
    )

    assert response.status_code == 500
    detail = response.json()["detail"]
    assert detail["error"] == "Failed to process video"
    assert "Cannot open video" in detail["message"]
    assert list(upload_dir.iterdir()) == []


def test_upload_video(upload_dir, synthetic, tmp_path):
    response = client.post(
        "/api/upload-video",
        files={"video": ("session.avi", avi_bytes(tmp_path), "video/avi")},
        data={"analysis_type": "desk"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["analysis_type"] == "desk"
    assert body["filename"].startswith("video-")
    assert body["results"]["success"] is True
    assert body["results"]["frame_count"] == 8
    assert body["results"]["summary"]["overall_rating"] in {"Excellent", "Good", "Fair", "Poor"}
    assert list(upload_dir.iterdir()) == []


def test_upload_video_invalid_type(upload_dir, synthetic, tmp_path):
    body = client.post(
        "/api/upload-video",
        files={"video": ("session.avi", avi_bytes(tmp_path), "video/avi")},
        data={"analysis_type": "yoga"},
    ).json()

    assert body["success"] is True
    assert body["results"]["success"] is False
    assert body["results"]["error"].startswith("Invalid analysis type")


def test_upload_video_missing_type(upload_dir, synthetic, tmp_path):
    body = client.post(
        "/api/upload-video",
        files={"video": ("session.avi", avi_bytes(tmp_path), "video/avi")},
    ).json()

    assert body["success"] is True
    assert body["analysis_type"] is None
    assert body["results"]["success"] is False
    assert body["results"]["error"].startswith("Invalid analysis type")
    assert list(upload_dir.iterdir()) == []


def test_upload_over_size_limit(tmp_path, monkeypatch):
    store = UploadStore(base_path=str(tmp_path / "uploads"), max_size_mb=1)
    monkeypatch.setattr(shared.storage, "_store_instance", store)

    response = client.post(
        "/api/upload-video",
        files={"video": ("big.mp4", b"\x00" * (1024 * 1024 + 1), "video/mp4")},
        data={"analysis_type": "squat"},
    )

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "File too large"
    assert list(store.base_path.iterdir()) == []


def test_read_upload_stops_at_limit():
    unsized = UploadFile(file=io.BytesIO(b"x" * 10))

    with pytest.raises(UploadRejected, match="File too large"):
        asyncio.run(read_upload(unsized, max_bytes=4))


def test_read_upload_within_limit():
    upload = UploadFile(file=io.BytesIO(b"x" * 10))
    assert asyncio.run(read_upload(upload, max_bytes=10)) == b"x" * 10


# ═══════════════════════════════════════════════════════════════════════════════
# WEBSOCKET
# ═══════════════════════════════════════════════════════════════════════════════

def test_websocket_frame_analysis(synthetic):
    image = np.zeros((16, 16, 3), np.uint8)

    with client.websocket_connect("/api/ws/analyze") as ws:
        ws.send_json({"image_data": encode_png(image, data_url=True), "analysis_type": "squat"})
        reply = ws.receive_json()

    assert reply["type"] == "analysis-result"
    assert isinstance(reply["timestamp"], int)
    assert reply["result"]["success"] is True
    assert reply["result"]["analysis"]["posture_type"] == "squat"
    assert len(reply["result"]["landmarks"]) == 33


def test_websocket_invalid_type_is_a_result(synthetic):
    with client.websocket_connect("/api/ws/analyze") as ws:
        ws.send_json({"image_data": encode_png(np.zeros((8, 8, 3), np.uint8)), "analysis_type": "yoga"})
        reply = ws.receive_json()

    assert reply["type"] == "analysis-result"
    assert reply["result"]["success"] is False


def test_websocket_bad_frame_keeps_connection(synthetic):
    with client.websocket_connect("/api/ws/analyze") as ws:
        ws.send_json({"image_data": "%%% not base64 %%%", "analysis_type": "desk"})
        error = ws.receive_json()

        ws.send_text("not json")
        not_json = ws.receive_json()

        ws.send_json({"image_data": encode_png(np.zeros((8, 8, 3), np.uint8)), "analysis_type": "desk"})
        reply = ws.receive_json()

    assert error == {"type": "analysis-error", "error": "Invalid image data"}
    assert not_json["type"] == "analysis-error"
    assert reply["type"] == "analysis-result"
