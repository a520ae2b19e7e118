# routes/uploads.py: admin image uploads, stored on local disk
import base64
import binascii
import os
import re
import time

from flask import Blueprint, current_app, g, jsonify, send_from_directory
from werkzeug.utils import secure_filename

from errors import BadRequest
from extensions import limiter
from routes.forms import UploadForm, json_body, load_form
from security.middleware import admin_required

uploads_bp = Blueprint('uploads', __name__)

ALLOWED_EXT = {".png", ".jpg", ".jpeg", ".webp"}
DATA_URI = re.compile(r"^data:([^;]+);base64,(.+)$")


def _upload_rate_limit():
    return current_app.config["UPLOAD_RATE_LIMIT"]


def split_data_uri(data):
    """Return (mime, base64 payload) for a data URI or a bare base64 string."""
    if not data.startswith("data:"):
        return "", data
    match = DATA_URI.match(data)
    if not match:
        raise BadRequest("Invalid data URI format")
    return match.group(1), match.group(2)


def pick_extension(filename, mime):
    # ".png" and "photo." carry no usable suffix; fall through to the MIME type
    ext = os.path.splitext(filename or "")[1].lower()
    if ext and ext != ".":
        return ext
    if mime:
        subtype = mime.split("/", 1)[1] if "/" in mime else ""
        if subtype:
            return "." + re.sub(r"[^\w]", "", subtype).lower()
    return ".png"


def upload_folder():
    # absolute paths pass through os.path.join unchanged
    return os.path.join(current_app.root_path, current_app.config["UPLOAD_FOLDER"])


def stored_name(filename, extension, now_ms):
    safe = secure_filename(filename or f"upload{extension}").lower()[:80]
    base = safe[: -len(extension)] if safe.endswith(extension) else safe
    return f"{now_ms}-{base or 'upload'}{extension}"


@uploads_bp.route("/api/uploads", methods=["POST"])
@limiter.limit(_upload_rate_limit)
@admin_required
def upload_image():
    body = json_body()
    form = load_form(UploadForm, {"image": body.get("data"), "filename": body.get("filename")})
    mime, payload = split_data_uri(form.image.data)
    if not payload:
        raise BadRequest("Empty image payload")

    extension = pick_extension(form.filename.data, mime)
    if extension not in ALLOWED_EXT:
        raise BadRequest("Unsupported image type")

    try:
        content = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise BadRequest("Invalid base64 data")
    if not content:
        raise BadRequest("Empty image payload")

    folder = upload_folder()
    os.makedirs(folder, exist_ok=True)
    name = stored_name(form.filename.data, extension, int(time.time() * 1000))
    with open(os.path.join(folder, name), "wb") as fh:
        fh.write(content)

    current_app.logger.info("Upload by %s: %s (%d bytes)", g.principal.username, name, len(content))
    return jsonify({"url": f"/uploads/{name}"}), 201


@uploads_bp.route("/uploads/<path:filename>", methods=["GET"])
def uploaded_file(filename):
    return send_from_directory(upload_folder(), filename)
