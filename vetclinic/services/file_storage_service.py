# File storage service module for uploaded images
import logging
import os
import uuid
from flask import current_app
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif'}


def allowed_file(filename):
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def _directory_path(directory):
    return os.path.join(current_app.config['UPLOAD_FOLDER'], directory)


def store_file(file, directory):
    """Save an uploaded file under ``UPLOAD_FOLDER/directory``.

    Returns ``(relative_path, error)``; the relative path is what gets stored
    on the model and served from ``/uploads/<path>``.
    """
    if not file or file.filename == '' or not allowed_file(file.filename):
        return None, 'Invalid image file. Allowed extensions: png, jpg, jpeg, gif'
    original_name = secure_filename(file.filename)
    extension = file.filename.rsplit('.', 1)[1].lower()
    file_name = f"{uuid.uuid4().hex}.{extension}"
    upload_path = _directory_path(directory)
    try:
        os.makedirs(upload_path, exist_ok=True)
        file.save(os.path.join(upload_path, file_name))
    except OSError as e:
        logger.error(f"[File Upload] Could not store file {original_name}: {e}")
        return None, 'Could not store file. Please try again!'
    logger.info(f"[File Upload] Stored {original_name} as {directory}/{file_name}")
    return f"{directory}/{file_name}", None


def get_file_path(relative_path):
    return os.path.normpath(os.path.join(current_app.config['UPLOAD_FOLDER'], relative_path))


def delete_file(relative_path):
    if not relative_path:
        return
    path = get_file_path(relative_path)
    try:
        if os.path.exists(path):
            os.remove(path)
    except OSError as e:
        logger.warning(f"[File Upload] Could not delete {path}: {e}")
