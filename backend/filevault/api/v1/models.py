"""
API Models for request/response validation and Swagger documentation
"""

from flask_restx import Model, fields

# =============================================================================
# Request Models
# =============================================================================

rename_request = Model(
    "RenameRequest",
    {
        "name": fields.String(required=True, description="New file name", example="report.pdf"),
    },
)

_share_settings = {
    "canView": fields.Boolean(description="Visitors may view the file", default=True),
    "canDownload": fields.Boolean(description="Visitors may download the file", default=True),
    "password": fields.String(description="Password protecting the link"),
    "expiresInDays": fields.Integer(
        description="Lifetime in days, 0 for no expiry", min=0, max=365
    ),
    "maxDownloads": fields.Integer(description="Download quota", min=1),
}

share_create_request = Model("ShareCreateRequest", _share_settings)

share_update_request = Model(
    "ShareUpdateRequest",
    {
        **_share_settings,
        "removePassword": fields.Boolean(
            description="Remove password protection; wins over password", default=False
        ),
    },
)

password_request = Model(
    "PasswordRequest",
    {
        "password": fields.String(required=True, description="Link password"),
    },
)

# =============================================================================
# Response Models
# =============================================================================

file_model = Model(
    "File",
    {
        "id": fields.String(description="File identifier"),
        "name": fields.String(description="File name"),
        "format": fields.String(description="File format", example="pdf"),
        "mimeType": fields.String(description="MIME type"),
        "size": fields.Integer(description="Size in bytes"),
        "url": fields.String(description="Content URL"),
        "thumbnailUrl": fields.String(description="Thumbnail URL", allow_null=True),
        "thumbnailIsFallback": fields.Boolean(
            description="Thumbnail is a preview of the original instead of a converted page"
        ),
        "isDeleted": fields.Boolean(description="File is in the trash"),
        "deletedAt": fields.String(description="Trash timestamp", allow_null=True),
        "createdAt": fields.String(description="Upload timestamp"),
        "updatedAt": fields.String(description="Last modification timestamp"),
    },
)

pagination_model = Model(
    "Pagination",
    {
        "currentPage": fields.Integer,
        "totalPages": fields.Integer,
        "totalFiles": fields.Integer,
        "hasNextPage": fields.Boolean,
        "hasPrevPage": fields.Boolean,
        "limit": fields.Integer,
    },
)

share_link_model = Model(
    "ShareLink",
    {
        "id": fields.String(description="Share link identifier"),
        "shareToken": fields.String(description="Public token"),
        "shareUrl": fields.String(description="Public page URL"),
        "canView": fields.Boolean,
        "canDownload": fields.Boolean,
        "hasPassword": fields.Boolean,
        "expiresAt": fields.String(allow_null=True),
        "maxDownloads": fields.Integer(allow_null=True),
        "downloadCount": fields.Integer,
        "isActive": fields.Boolean,
        "createdAt": fields.String,
        "updatedAt": fields.String,
    },
)

thumbnail_response = Model(
    "ThumbnailResponse",
    {
        "success": fields.Boolean,
        "thumbnailUrl": fields.String(description="Thumbnail URL"),
        "isFallback": fields.Boolean(description="Thumbnail is a preview of the original"),
        "originalName": fields.String,
        "format": fields.String,
    },
)

error_response = Model(
    "ErrorResponse",
    {
        "success": fields.Boolean(default=False),
        "error": fields.String(description="Error category"),
        "title": fields.String(description="Error title"),
        "message": fields.String(description="User-friendly message"),
        "action": fields.String(description="Suggested action"),
    },
)

ALL_MODELS = (
    rename_request,
    share_create_request,
    share_update_request,
    password_request,
    file_model,
    pagination_model,
    share_link_model,
    thumbnail_response,
    error_response,
)
