"""
API v1 - FileVault REST API

This module contains the versioned API endpoints with OpenAPI/Swagger documentation.
"""

from flask import Blueprint
from flask_restx import Api


def create_api_blueprint(api_version: str = "v1") -> Blueprint:
    """
    Build the versioned API blueprint.

    A new Blueprint and Api are created per call so each Flask app gets
    its own registration.

    Args:
        api_version: Version segment of the URL prefix

    Returns:
        Blueprint serving /api/<version> with Swagger UI at /api/<version>/docs
    """
    from .namespaces import files_ns, share_ns

    blueprint = Blueprint(f"api_{api_version}", __name__, url_prefix=f"/api/{api_version}")

    api = Api(
        blueprint,
        version="1.0",
        title="FileVault API",
        description="Personal file storage with PDF thumbnails and share links",
        doc="/docs",  # Swagger UI will be available at /api/v1/docs
        authorizations={
            "bearer": {"type": "apiKey", "in": "header", "name": "Authorization"}
        },
    )

    api.add_namespace(files_ns, path="/files")
    api.add_namespace(share_ns, path="/share")
    return blueprint
