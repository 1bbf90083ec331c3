"""
API Namespaces - Organized endpoint groups
"""

from functools import wraps

from flask import Response, current_app, g, redirect, request
from flask_restx import Namespace, Resource
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from ...application.file_service import FileService
from ...application.share_service import ShareService
from ...application.thumbnail_result import ThumbnailStatus
from ...domain.errors import (
    DomainError,
    ErrorCategory,
    FileTooLargeError,
    InvalidFileRequestError,
    InvalidShareRequestError,
    create_error_response,
    error_response_for,
)
from ..auth import require_auth
from .models import (
    ALL_MODELS,
    error_response,
    file_model,
    password_request,
    rename_request,
    share_create_request,
    share_link_model,
    share_update_request,
    thumbnail_response,
)


def handle_errors(f):
    """
    Translate exceptions raised by a resource method into error responses.

    Domain errors map to their category's status. A request body over
    MAX_CONTENT_LENGTH is reported as file_too_large and other HTTP
    exceptions pass through to Flask. Anything else is logged with its
    traceback and reported as a generic 500.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except DomainError as e:
            body, status = error_response_for(e)
            if status >= 500:
                current_app.logger.error(f"{request.method} {request.path} failed: {e}")
            else:
                current_app.logger.info(f"{request.method} {request.path} -> {status}: {e}")
            return body, status
        except RequestEntityTooLarge as e:
            current_app.logger.info(f"{request.method} {request.path} -> 400: {e}")
            return error_response_for(FileTooLargeError("Upload exceeds the maximum allowed size"))
        except HTTPException:
            raise
        except Exception as e:
            current_app.logger.exception(f"Unexpected error in {request.method} {request.path}: {e}")
            return create_error_response(ErrorCategory.SYSTEM_ERROR, str(e))

    return decorated_function


def _json_body(error_class=InvalidShareRequestError) -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise error_class("Request body must be a JSON object")
    return data


def _file_service() -> FileService:
    return current_app.container.resolve(FileService)


def _share_service() -> ShareService:
    return current_app.container.resolve(ShareService)


# =============================================================================
# Files Namespace - Owner file operations
# =============================================================================

files_ns = Namespace("files", description="File storage operations")

for _model in ALL_MODELS:
    files_ns.add_model(_model.name, _model)


@files_ns.route("/upload-file")
class FileUpload(Resource):
    """Upload a file"""

    @files_ns.doc("upload_file", security="bearer")
    @files_ns.response(200, "Uploaded", file_model)
    @files_ns.response(400, "Bad Request", error_response)
    @files_ns.response(401, "Unauthorized", error_response)
    @require_auth
    @handle_errors
    def post(self):
        """
        Upload a file

        Accepts a multipart `file` field. PDFs get a first-page thumbnail,
        or a preview of the original when conversion is unavailable.
        """
        uploaded = request.files.get("file")
        if uploaded is None:
            raise InvalidFileRequestError("No file provided")

        payload = _file_service().upload(
            g.user_id,
            uploaded.read(),
            uploaded.filename or "",
            uploaded.mimetype or "",
        )
        return {"success": True, "message": "File uploaded successfully", "file": payload}, 200


@files_ns.route("/get-files")
class FileList(Resource):
    """List the caller's files"""

    @files_ns.doc(
        "get_files",
        security="bearer",
        params={
            "page": "Page number, starting at 1",
            "limit": "Page size, at most 100",
            "search": "Case-insensitive name filter",
            "file_type": "Format filter, e.g. pdf",
        },
    )
    @files_ns.response(200, "Success")
    @files_ns.response(400, "Bad Request", error_response)
    @require_auth
    @handle_errors
    def get(self):
        """List live files, newest first"""
        data = _file_service().list_files(
            g.user_id,
            page=request.args.get("page", 1, type=int),
            limit=request.args.get("limit", 10, type=int),
            search=request.args.get("search"),
            file_type=request.args.get("file_type"),
        )
        return {"success": True, "message": "Files retrieved successfully", "data": data}, 200


@files_ns.route("/trash")
class FileTrash(Resource):
    """List the caller's trashed files"""

    @files_ns.doc("get_trash", security="bearer", params={"page": "Page number", "limit": "Page size"})
    @files_ns.response(200, "Success")
    @require_auth
    @handle_errors
    def get(self):
        data = _file_service().list_trash(
            g.user_id,
            page=request.args.get("page", 1, type=int),
            limit=request.args.get("limit", 10, type=int),
        )
        return {"success": True, "message": "Files retrieved successfully", "data": data}, 200


@files_ns.route("/rename-file/<string:file_id>")
@files_ns.param("file_id", "The file identifier")
class FileRename(Resource):
    """Rename a file"""

    @files_ns.doc("rename_file", security="bearer")
    @files_ns.expect(rename_request)
    @files_ns.response(200, "Renamed", file_model)
    @files_ns.response(404, "File Not Found", error_response)
    @require_auth
    @handle_errors
    def patch(self, file_id):
        name = _json_body(InvalidFileRequestError).get("name")
        if not isinstance(name, str):
            raise InvalidFileRequestError("name is required")

        payload = _file_service().rename(file_id, g.user_id, name)
        return {"success": True, "message": "File renamed successfully", "data": payload}, 200


@files_ns.route("/soft-delete/<string:file_id>")
@files_ns.param("file_id", "The file identifier")
class FileSoftDelete(Resource):
    """Move a file to the trash"""

    @files_ns.doc("soft_delete_file", security="bearer")
    @files_ns.response(200, "Trashed", file_model)
    @files_ns.response(404, "File Not Found", error_response)
    @require_auth
    @handle_errors
    def put(self, file_id):
        payload = _file_service().trash(file_id, g.user_id)
        return {"success": True, "message": "File moved to trash", "file": payload}, 200


@files_ns.route("/restore/<string:file_id>")
@files_ns.param("file_id", "The file identifier")
class FileRestore(Resource):
    """Restore a trashed file"""

    @files_ns.doc("restore_file", security="bearer")
    @files_ns.response(200, "Restored", file_model)
    @files_ns.response(404, "File Not Found", error_response)
    @require_auth
    @handle_errors
    def put(self, file_id):
        payload = _file_service().restore(file_id, g.user_id)
        return {"success": True, "message": "File restored successfully", "file": payload}, 200


@files_ns.route("/delete-file/<string:file_id>")
@files_ns.param("file_id", "The file identifier")
class FileDelete(Resource):
    """Permanently delete a file"""

    @files_ns.doc("delete_file", security="bearer")
    @files_ns.response(200, "Deleted")
    @files_ns.response(404, "File Not Found", error_response)
    @require_auth
    @handle_errors
    def delete(self, file_id):
        """Remove the file content and its metadata"""
        _file_service().delete(file_id, g.user_id)
        return {"success": True, "message": "File deleted permanently"}, 200


@files_ns.route("/download/<string:file_id>")
@files_ns.param("file_id", "The file identifier")
class FileDownload(Resource):
    """Download a file"""

    @files_ns.doc("download_file", security="bearer")
    @files_ns.response(302, "Redirect to the content URL")
    @files_ns.response(404, "File Not Found", error_response)
    @require_auth
    @handle_errors
    def get(self, file_id):
        return redirect(_file_service().download_url(file_id, g.user_id), code=302)


@files_ns.route("/view-file/<string:file_id>")
@files_ns.param("file_id", "The file identifier")
class FileView(Resource):
    """View a file inline"""

    @files_ns.doc("view_file", security="bearer")
    @files_ns.response(200, "File content")
    @files_ns.response(404, "File Not Found", error_response)
    @files_ns.response(500, "Content Unavailable", error_response)
    @require_auth
    @handle_errors
    def get(self, file_id):
        """
        Stream the file content for display in the browser

        The content is served with the file's MIME type and an inline
        Content-Disposition.
        """
        file, chunks = _file_service().open_for_viewing(file_id, g.user_id)
        response = Response(chunks, mimetype=file.mime_type or "application/octet-stream")
        response.headers.set("Content-Disposition", "inline", filename=file.name)
        return response


@files_ns.route("/pdf-thumbnail/<string:file_id>")
@files_ns.param("file_id", "The file identifier")
class PdfThumbnail(Resource):
    """Generate a PDF thumbnail"""

    @files_ns.doc("pdf_thumbnail", security="bearer")
    @files_ns.response(200, "Success", thumbnail_response)
    @files_ns.response(400, "Not a PDF", error_response)
    @files_ns.response(404, "File Not Found", error_response)
    @files_ns.response(502, "Conversion Failed", error_response)
    @files_ns.response(504, "Conversion Timed Out", error_response)
    @require_auth
    @handle_errors
    def get(self, file_id):
        """
        Convert the first page of a PDF into an image

        Falls back to a preview of the original document when conversion
        fails. Errors only when neither is available.
        """
        payload, result = _file_service().refresh_thumbnail(file_id, g.user_id)

        if result.status == ThumbnailStatus.NONE:
            category = result.error_category or ErrorCategory.CONVERSION_FAILED
            current_app.logger.warning(
                f"No thumbnail available for file {file_id}: {result.error_message}"
            )
            return create_error_response(category, result.error_message)

        return {
            "success": True,
            "thumbnailUrl": payload["thumbnailUrl"],
            "isFallback": payload["thumbnailIsFallback"],
            "originalName": payload["name"],
            "format": payload["format"],
        }, 200


# =============================================================================
# Share Namespace - Share link management and public access
# =============================================================================

share_ns = Namespace("share", description="Share link operations")

for _model in ALL_MODELS:
    share_ns.add_model(_model.name, _model)


@share_ns.route("/create-share-link/<string:file_id>")
@share_ns.param("file_id", "The file identifier")
class ShareLinkCreate(Resource):
    """Get or create the share link of a file"""

    @share_ns.doc("create_share_link", security="bearer")
    @share_ns.expect(share_create_request)
    @share_ns.response(200, "Existing link", share_link_model)
    @share_ns.response(201, "Created", share_link_model)
    @share_ns.response(404, "File Not Found", error_response)
    @require_auth
    @handle_errors
    def post(self, file_id):
        """
        Get or create a share link

        Returns the file's active link when there is one. Settings in the
        body only apply to a newly created link.
        """
        payload, created = _share_service().create_link(file_id, g.user_id, _json_body())
        if created:
            return {"success": True, "message": "Share link created successfully", "data": payload}, 201
        return {"success": True, "message": "Share link retrieved successfully", "data": payload}, 200


@share_ns.route("/mine")
class ShareLinkList(Resource):
    """List the caller's active share links"""

    @share_ns.doc("list_share_links", security="bearer")
    @share_ns.response(200, "Success")
    @require_auth
    @handle_errors
    def get(self):
        links = _share_service().list_links(g.user_id)
        return {"success": True, "message": "Share links retrieved successfully", "data": links}, 200


@share_ns.route("/update/<string:share_id>")
@share_ns.param("share_id", "The share link identifier")
class ShareLinkUpdate(Resource):
    """Update share link settings"""

    @share_ns.doc("update_share_link", security="bearer")
    @share_ns.expect(share_update_request)
    @share_ns.response(200, "Updated", share_link_model)
    @share_ns.response(400, "Bad Request", error_response)
    @share_ns.response(404, "Share Link Not Found", error_response)
    @require_auth
    @handle_errors
    def put(self, share_id):
        """Partially update a share link; omitted fields keep their value"""
        payload = _share_service().update_link(share_id, g.user_id, _json_body())
        return {"success": True, "message": "Share link setting updated successfully", "data": payload}, 200


@share_ns.route("/<string:share_id>")
@share_ns.param("share_id", "The share link identifier")
class ShareLinkRevoke(Resource):
    """Revoke a share link"""

    @share_ns.doc("revoke_share_link", security="bearer")
    @share_ns.response(200, "Revoked")
    @share_ns.response(404, "Share Link Not Found", error_response)
    @require_auth
    @handle_errors
    def delete(self, share_id):
        _share_service().revoke_link(share_id, g.user_id)
        return {"success": True, "message": "Share link deleted successfully"}, 200


@share_ns.route("/<string:share_token>")
@share_ns.param("share_token", "The public share token")
class SharedFile(Resource):
    """Public view of a shared file"""

    @share_ns.doc("get_shared_file")
    @share_ns.response(200, "Success")
    @share_ns.response(403, "Expired or Quota Exceeded", error_response)
    @share_ns.response(404, "Share Link Not Found", error_response)
    @handle_errors
    def get(self, share_token):
        """
        Read a shared file

        Password-protected links return only the file name, format and
        size until the password is verified.
        """
        data = _share_service().get_shared(share_token)
        if data["requiresPassword"]:
            return {"success": True, "message": "Password required to access this file", "data": data}, 200
        return {"success": True, "message": "Shared file retrieved successfully", "data": data}, 200


@share_ns.route("/<string:share_token>/verify-password")
@share_ns.param("share_token", "The public share token")
class SharePasswordVerify(Resource):
    """Unlock a password-protected share link"""

    @share_ns.doc("verify_share_password")
    @share_ns.expect(password_request)
    @share_ns.response(200, "Success")
    @share_ns.response(400, "Password Missing or Link Unprotected", error_response)
    @share_ns.response(401, "Incorrect Password", error_response)
    @share_ns.response(403, "Share Link Expired or Used Up", error_response)
    @share_ns.response(404, "Share Link Not Found", error_response)
    @handle_errors
    def post(self, share_token):
        password = _json_body().get("password")
        if password is not None and not isinstance(password, str):
            raise InvalidShareRequestError("password must be a string")

        data = _share_service().verify_password(share_token, password)
        return {"success": True, "message": "Password verified successfully", "data": data}, 200


@share_ns.route("/<string:share_token>/download")
@share_ns.param("share_token", "The public share token")
class SharedFileDownload(Resource):
    """Download a shared file"""

    @share_ns.doc("download_shared_file", params={"password": "Password for protected links"})
    @share_ns.response(302, "Redirect to the content URL")
    @share_ns.response(400, "Password Required", error_response)
    @share_ns.response(401, "Incorrect Password", error_response)
    @share_ns.response(403, "Not Allowed, Expired or Quota Exceeded", error_response)
    @share_ns.response(404, "Share Link Not Found", error_response)
    @handle_errors
    def get(self, share_token):
        """Count a download against the link's quota and redirect to the file"""
        url = _share_service().download(share_token, request.args.get("password"))
        return redirect(url, code=302)
