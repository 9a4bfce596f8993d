"""
POSTURECOACH Posture Service Router

Endpoints for squat/desk posture analysis: uploaded videos, detector output
posted as JSON, and a real-time WebSocket that analyzes camera frames.
"""

import base64
import binascii
import json
import logging
from typing import Any, Dict, List, Optional

import cv2
import numpy as np
from fastapi import APIRouter, File, Form, HTTPException, UploadFile, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, Field

from core.threading import get_frame_pool, get_video_pool
from shared.storage import UploadRejected, get_upload_store
from shared.utils import error_response, get_now_iso

from .models import (
    DetectionResult,
    analyze_image,
    analyze_video,
    evaluate_frame,
    get_pose_detector,
)
from .models.analysis import now_ms

logger = logging.getLogger(__name__)

UPLOAD_CHUNK_SIZE = 1024 * 1024

router = APIRouter()


# ============= Pydantic Models =============

class AnalyzeLandmarksRequest(BaseModel):
    """Detector output computed client-side."""
    landmarks: List[Optional[Dict[str, Any]]] = Field(default_factory=list)
    detected: bool = True
    analysis_type: str = Field(..., description="'squat' or 'desk'")


# ============= Helpers =============

def decode_image(image_data: str) -> np.ndarray:
    """
    Decode a base64 JPEG/PNG (optionally a data URL) into an RGB array.

    Raises:
        ValueError: payload is not a decodable image
    """
    if not image_data:
        raise ValueError("No image data received")
    if image_data.startswith("data:"):
        image_data = image_data.split(",", 1)[-1]

    try:
        raw = base64.b64decode(image_data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError("Invalid image data") from e

    frame = cv2.imdecode(np.frombuffer(raw, np.uint8), cv2.IMREAD_COLOR)
    if frame is None:
        raise ValueError("Invalid image data")
    return cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)


async def read_upload(upload: UploadFile, max_bytes: int) -> bytes:
    """
    Read an upload in chunks, stopping as soon as it exceeds max_bytes.

    Raises:
        UploadRejected: the upload is larger than max_bytes
    """
    if upload.size is not None and upload.size > max_bytes:
        raise UploadRejected("File too large")

    chunks = []
    received = 0
    while True:
        chunk = await upload.read(UPLOAD_CHUNK_SIZE)
        if not chunk:
            break
        received += len(chunk)
        if received > max_bytes:
            raise UploadRejected("File too large")
        chunks.append(chunk)
    return b"".join(chunks)


# ============= REST Endpoints =============

@router.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "Server is running", "timestamp": get_now_iso()}


@router.post("/upload-video")
async def upload_video(
    video: Optional[UploadFile] = File(None),
    analysis_type: Optional[str] = Form(None),
):
    """
    Analyze posture across an uploaded video.

    The upload is stored only for the duration of the analysis. A missing or
    unknown analysis_type is reported in results, never defaulted.

    results.summary.average_score is the mean frame score rounded half-up;
    results.summary.overall_rating is banded on the unrounded mean, so an
    average of 79.5 shows as 80 with rating "Good".
    """
    if video is None:
        raise HTTPException(status_code=400, detail=error_response("No video file uploaded"))

    store = get_upload_store()
    try:
        store.validate(video.filename, video.content_type, 0)
        content = await read_upload(video, store.max_size_bytes)
        video_path = store.save_video(content, video.filename, video.content_type)
    except UploadRejected as e:
        raise HTTPException(status_code=400, detail=error_response(str(e)))

    logger.info(f"Analyzing video: {video_path.name} for {analysis_type} posture")

    try:
        results = await get_video_pool().run(
            analyze_video,
            str(video_path),
            analysis_type,
            executor=get_frame_pool(),
        )
    except Exception as e:
        logger.error(f"Error processing video: {e}")
        raise HTTPException(
            status_code=500,
            detail=error_response("Failed to process video", message=str(e)),
        )
    finally:
        store.remove(video_path)

    return {
        "success": True,
        "results": results.to_dict(),
        "analysis_type": analysis_type,
        "filename": video_path.name,
    }


@router.post("/analyze-landmarks")
async def analyze_landmarks(request: AnalyzeLandmarksRequest) -> Dict[str, Any]:
    """Evaluate one frame of detector output that was computed client-side."""
    detection = DetectionResult(
        landmarks=request.landmarks,
        detected=request.detected,
    )
    return evaluate_frame(detection, request.analysis_type).to_dict()


# ============= WebSocket Endpoints =============

@router.websocket("/ws/analyze")
async def analyze_stream(websocket: WebSocket):
    """
    Real-time frame analysis.

    Client sends {"image_data": <base64 image>, "analysis_type": "squat" | "desk"};
    each frame gets an "analysis-result" or "analysis-error" reply.
    """
    await websocket.accept()
    client = websocket.client.host if websocket.client else "unknown"
    logger.info(f"Client connected: {client}")

    try:
        while True:
            message = await websocket.receive_text()

            try:
                data = json.loads(message)
                if not isinstance(data, dict):
                    raise ValueError("Invalid message")
                image = decode_image(data.get("image_data", ""))
                result = await get_frame_pool().run(
                    analyze_image,
                    image,
                    data.get("analysis_type"),
                    get_pose_detector(),
                )
                await websocket.send_json({
                    "type": "analysis-result",
                    "result": result.to_dict(),
                    "timestamp": now_ms(),
                })
            except Exception as e:
                logger.error(f"Error analyzing frame: {e}")
                await websocket.send_json({
                    "type": "analysis-error",
                    "error": str(e),
                })

    except WebSocketDisconnect:
        logger.info(f"Client disconnected: {client}")
