#!/usr/bin/env python3
"""
CleanSweep Inpainting API Server
Upload an image, paint a mask, run Telea inpainting and compare before/after.
"""

from __future__ import annotations

import os
import logging
import uuid
from io import BytesIO
from pathlib import Path
from typing import Dict
from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from flask import Flask, request, jsonify, send_file
from flask_cors import CORS
from werkzeug.utils import secure_filename

# --- Centralized Logging Configuration ---
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
    datefmt='%H:%M:%S'
)

# Import services and models
from models.errors import (
    InpaintError, MissingMask, DecodeFailure, UnsupportedFormat,
    DimensionMismatch, PipelineBusy, EngineUnavailable, StrokeStateError,
)
from models.inpaint_engine import InpaintEngine
from models.raster import Raster
from pipeline.editing_session import EditingSession, AppState
from pipeline.inpaint_pipeline import InpaintPipeline
from services.raster_service import RasterService

app = Flask(__name__)
CORS(app)  # Enable CORS for frontend communication

# Configuration
RESULTS_FOLDER = os.getenv("RESULTS_FOLDER", "data/api_results")
ALLOWED_EXTENSIONS = set(os.getenv("ALLOWED_EXTENSIONS", "png,jpg,jpeg,gif,bmp,webp").split(","))
MAX_CONTENT_LENGTH = int(os.getenv("MAX_UPLOAD_SIZE_MB", "50")) * 1024 * 1024

app.config['MAX_CONTENT_LENGTH'] = MAX_CONTENT_LENGTH

# Initialize services
raster_service = RasterService()
inpaint_pipeline = InpaintPipeline()  # shared: one inpainting run at a time

logger = logging.getLogger(__name__)

# Session storage for editing state
sessions: Dict[str, EditingSession] = {}

# Error kind → HTTP status
_STATUS = (
    (PipelineBusy, 409),
    (EngineUnavailable, 503),
    (DimensionMismatch, 500),
    (MissingMask, 400),
    (DecodeFailure, 400),
    (UnsupportedFormat, 400),
    (StrokeStateError, 400),
    (ValueError, 400),
    (InpaintError, 400),
)


def status_for(err: Exception) -> int:
    for kind, status in _STATUS:
        if isinstance(err, kind):
            return status
    return 500


def error_response(err: Exception):
    return jsonify({'success': False, 'error': type(err).__name__, 'message': str(err)}), status_for(err)


def get_or_create_session(session_id: str = None) -> EditingSession:
    """Get existing session or create new one."""
    if session_id is None:
        session_id = str(uuid.uuid4())

    if session_id not in sessions:
        sessions[session_id] = EditingSession(session_id, pipeline=inpaint_pipeline)

    return sessions[session_id]


def get_session(payload: dict) -> EditingSession | None:
    session_id = payload.get('session_id')
    if not session_id:
        return None
    return sessions.get(session_id)


def optional_int(value) -> int | None:
    return int(value) if value not in (None, "") else None


def allowed_file(filename: str) -> bool:
    """Check if file extension is allowed."""
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def save_image_for_serving(raster: Raster, filename: str) -> str:
    """Save image to results folder and return URL path."""
    results_path = Path(RESULTS_FOLDER) / filename
    raster_service.save(raster, results_path)
    return f"/api/image/{filename}"


def surface_json(session: EditingSession) -> dict:
    surface = session.surface
    return {
        'display_width': surface.display_width,
        'display_height': surface.display_height,
        'scale_to_source': surface.scale_to_source,
        'origin_x': surface.origin_x,
        'origin_y': surface.origin_y,
    }


@app.route('/api/upload', methods=['POST'])
def upload_image():
    """Decode the source image and open an editing session."""
    try:
        payload = request.form if request.files else (request.get_json(silent=True) or {})
        session = get_or_create_session(payload.get('session_id'))

        if 'image' in request.files:
            file = request.files['image']
            if file.filename == '':
                return jsonify({'success': False, 'message': 'No file selected'}), 400
            if not allowed_file(file.filename):
                return jsonify({'success': False, 'message': f'Unsupported file type: {secure_filename(file.filename)}'}), 400
            source = raster_service.decode(file.read(), what="source image")
        elif payload.get('image'):
            source = raster_service.decode(payload['image'], what="source image")
        else:
            return jsonify({'success': False, 'message': 'No image provided'}), 400

        session.load_source(source, optional_int(payload.get('container_width')),
                            optional_int(payload.get('container_height')))

        return jsonify({
            'success': True,
            'session_id': session.session_id,
            'width': source.width,
            'height': source.height,
            'channels': source.channels,
            'surface': surface_json(session),
            'state': session.state.value,
        })

    except (InpaintError, ValueError) as e:
        logger.error(f"Upload error: {e}")
        return error_response(e)
    except Exception as e:
        logger.error(f"Upload error: {e}")
        return jsonify({'success': False, 'message': f'Error loading image: {str(e)}'}), 500


@app.route('/api/stroke', methods=['POST'])
def stroke():
    """Pointer events in container coordinates: action = down | move | up | path."""
    payload = request.get_json(silent=True) or {}
    session = get_session(payload)
    if session is None:
        return jsonify({'success': False, 'message': 'Invalid session'}), 400

    try:
        action = payload.get('action')
        if action == 'down':
            session.pointer_down(float(payload['x']), float(payload['y']))
        elif action == 'move':
            points = payload.get('points') or [[payload['x'], payload['y']]]
            for x, y in points:
                session.pointer_move(float(x), float(y))
        elif action == 'up':
            session.pointer_up()
        elif action == 'path':
            painted = session.draw_path(payload['points'], optional_int(payload.get('radius')))
            logger.info(f"Session {session.session_id}: painted {len(painted)}-point stroke")
        else:
            return jsonify({'success': False, 'message': f'Unknown stroke action: {action}'}), 400

        return jsonify({'success': True, 'has_mask': session.can_process})

    except KeyError as e:
        return jsonify({'success': False, 'message': f'Missing field: {e.args[0]}'}), 400
    except TypeError as e:
        return jsonify({'success': False, 'message': f'Invalid stroke points: {e}'}), 400
    except (InpaintError, ValueError) as e:
        return error_response(e)


@app.route('/api/brush', methods=['POST'])
def set_brush():
    payload = request.get_json(silent=True) or {}
    session = get_session(payload)
    if session is None:
        return jsonify({'success': False, 'message': 'Invalid session'}), 400
    try:
        session.set_brush_radius(int(payload.get('radius')))
        return jsonify({'success': True, 'radius': session.brush_radius})
    except (TypeError, ValueError) as e:
        return jsonify({'success': False, 'message': f'Invalid brush radius: {e}'}), 400


@app.route('/api/clear-mask', methods=['POST'])
def clear_mask():
    payload = request.get_json(silent=True) or {}
    session = get_session(payload)
    if session is None:
        return jsonify({'success': False, 'message': 'Invalid session'}), 400
    try:
        session.clear_mask()
        return jsonify({'success': True, 'has_mask': False})
    except InpaintError as e:
        return error_response(e)


@app.route('/api/inpaint', methods=['POST'])
def inpaint():
    """Run the pipeline with the painted (or uploaded) mask."""
    payload = request.get_json(silent=True) or {}
    session = get_session(payload)
    if session is None:
        return jsonify({'success': False, 'message': 'Invalid session'}), 400

    try:
        mask = None
        if payload.get('mask'):
            mask = raster_service.decode(payload['mask'], what="mask image")
        radius = payload.get('radius')

        logger.info(f"Running inpainting for session {session.session_id}")
        result = session.process(payload.get('mode'), mask=mask,
                                 radius=int(radius) if radius is not None else None)
        if result is None:
            return error_response(session.failure)

        filename = f"processed_{session.session_id}_{int(result.timestamp * 1000)}.png"
        image_url = save_image_for_serving(result.processed, filename)

        return jsonify({
            'success': True,
            'session_id': session.session_id,
            'state': session.state.value,
            'original': raster_service.to_data_url(result.original, "PNG"),
            'processed': raster_service.to_data_url(result.processed),
            'image_url': image_url,
            'timestamp': result.timestamp,
            'message': 'Inpainting complete',
        })

    except (InpaintError, ValueError) as e:
        logger.error(f"Inpainting error: {e}")
        return error_response(e)
    except Exception as e:
        logger.error(f"Inpainting error: {e}")
        return jsonify({'success': False, 'message': f'Error in inpainting: {str(e)}'}), 500


@app.route('/api/compare', methods=['POST'])
def compare():
    """Composite original/processed at the requested reveal position."""
    payload = request.get_json(silent=True) or {}
    session = get_session(payload)
    if session is None:
        return jsonify({'success': False, 'message': 'Invalid session'}), 400

    try:
        if 'pointer_x' in payload:
            reveal = session.comparison_service.reveal_from_pointer(
                float(payload['pointer_x']), float(payload.get('left', 0.0)), float(payload['width']))
        else:
            reveal = float(payload.get('reveal', session.reveal))
        session.set_reveal(reveal)

        return jsonify({
            'success': True,
            'reveal': session.reveal,
            'image': raster_service.to_data_url(session.comparison()),
        })

    except KeyError as e:
        return jsonify({'success': False, 'message': f'Missing field: {e.args[0]}'}), 400
    except (InpaintError, ValueError) as e:
        return error_response(e)


@app.route('/api/download/<session_id>')
def download(session_id):
    """Processed result as a downloadable PNG."""
    session = sessions.get(session_id)
    if session is None or session.result is None:
        return jsonify({'error': 'No result to download'}), 404
    buffer = BytesIO(raster_service.encode(session.result.processed, "PNG"))
    return send_file(buffer, mimetype='image/png', as_attachment=True,
                     download_name=session.result.download_name)


@app.route('/api/image/<filename>')
def serve_image(filename):
    """Serve processed images."""
    try:
        image_path = Path(RESULTS_FOLDER) / secure_filename(filename)
        if image_path.exists():
            return send_file(image_path.resolve(), mimetype='image/png')
        else:
            return jsonify({'error': 'Image not found'}), 404
    except Exception as e:
        logger.error(f"Error serving image {filename}: {e}")
        return jsonify({'error': 'Error serving image'}), 500


@app.route('/api/back-to-editor', methods=['POST'])
def back_to_editor():
    payload = request.get_json(silent=True) or {}
    session = get_session(payload)
    if session is None:
        return jsonify({'success': False, 'message': 'Invalid session'}), 400
    try:
        session.back_to_editor()
        return jsonify({'success': True, 'state': session.state.value, 'has_mask': session.can_process})
    except InpaintError as e:
        return error_response(e)


@app.route('/api/health', methods=['GET'])
def health_check():
    """Health check endpoint (reports whether the inpainting backend loads)."""
    try:
        engine = InpaintEngine()
        engine_status = {'ready': True, 'backend': engine.name}
    except EngineUnavailable as e:
        engine_status = {'ready': False, 'message': str(e)}
    return jsonify({
        'status': 'healthy',
        'message': 'CleanSweep Inpainting API is running',
        'engine': engine_status,
        'busy': inpaint_pipeline.busy,
        'active_sessions': len(sessions)
    })


@app.route('/api/clear-session', methods=['POST'])
def clear_session():
    """Clear a session and free memory."""
    try:
        session_id = (request.get_json(silent=True) or {}).get('session_id')
        if session_id and session_id in sessions:
            sessions[session_id].reset()
            del sessions[session_id]
            return jsonify({'success': True, 'message': 'Session cleared', 'state': AppState.UPLOAD.value})
        else:
            return jsonify({'success': False, 'message': 'Session not found'})
    except Exception as e:
        logger.error(f"Error clearing session: {e}")
        return jsonify({'success': False, 'message': 'Error clearing session'}), 500


@app.errorhandler(413)
def too_large(e):
    """Handle file too large error."""
    return jsonify({'error': f'File too large. Maximum size is {MAX_CONTENT_LENGTH // (1024*1024)}MB.'}), 413


@app.errorhandler(500)
def internal_error(e):
    """Handle internal server error."""
    logger.error(f"Internal server error: {e}")
    return jsonify({'error': 'Internal server error'}), 500


def main():
    Path(RESULTS_FOLDER).mkdir(parents=True, exist_ok=True)
    logger.info("Starting CleanSweep Inpainting API Server...")
    logger.info(f"Results directory: {RESULTS_FOLDER}")
    logger.info(f"Max upload size: {MAX_CONTENT_LENGTH // (1024*1024)}MB")
    app.run(host=os.getenv("API_HOST", "0.0.0.0"), port=int(os.getenv("API_PORT", "5000")),
            debug=False, threaded=True)


if __name__ == '__main__':
    main()
