from core.imports import current_app, uuid, os
from werkzeug.utils import secure_filename


class UploadError(ValueError):
    pass


def allowed_file(filename):
    """Checks if a filename has an allowed extension."""
    return '.' in filename and \
           filename.rsplit('.', 1)[1].lower() in current_app.config["ALLOWED_EXTENSIONS"]


def save_upload(file, prefix=""):
    """Store an uploaded file and return its public /uploads/ path."""
    if not file or file.filename == '':
        raise UploadError("No file selected")
    if not allowed_file(file.filename):
        raise UploadError(f"File type not allowed for '{secure_filename(file.filename)}'")

    upload_folder = current_app.config["UPLOAD_FOLDER"]
    os.makedirs(upload_folder, exist_ok=True)

    ext = file.filename.rsplit('.', 1)[1].lower()
    filename = secure_filename(f"{prefix}{uuid.uuid4().hex}.{ext}")
    file.save(os.path.join(upload_folder, filename))

    return f"{current_app.config['UPLOAD_URL_PREFIX']}{filename}"


def upload_path(public_path):
    if not public_path:
        return None
    prefix = current_app.config["UPLOAD_URL_PREFIX"]
    if not public_path.startswith(prefix):
        return None
    filename = secure_filename(public_path[len(prefix):])
    if not filename:
        return None
    return os.path.join(current_app.config["UPLOAD_FOLDER"], filename)


def delete_upload(public_path):
    """Remove a stored file. Returns True when something was deleted."""
    path = upload_path(public_path)
    if path and os.path.exists(path):
        os.remove(path)
        current_app.logger.info(f"Deleted upload {public_path}")
        return True
    return False
