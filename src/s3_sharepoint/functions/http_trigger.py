"""HTTP trigger blueprint — status check and the S3 list/get/head endpoints."""

import json
import logging
from functools import lru_cache
from typing import Any

import azure.functions as func

from s3_sharepoint import __version__
from s3_sharepoint.config import AppConfig, load_config
from s3_sharepoint.graph.auth import GraphAuthError
from s3_sharepoint.graph.catalog import GraphApiError, ItemNotFoundError
from s3_sharepoint.graph.models import DEFAULT_PREFIX, ListQuery, ObjectAddress
from s3_sharepoint.s3.gateway import AccessDeniedError, ObjectGateway, gateway_from_config

logger = logging.getLogger(__name__)

bp = func.Blueprint()


class BadRequestError(Exception):
    """Raised when the request body or query is missing or has malformed fields."""


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Return the process-wide configuration, loaded on first use."""
    return load_config()


@lru_cache(maxsize=1)
def get_gateway() -> ObjectGateway:
    """Return the process-wide gateway; its token cache lives as long as the worker."""
    return gateway_from_config(get_config())


def _json_body(req: func.HttpRequest) -> dict[str, Any]:
    try:
        body = req.get_json()
    except ValueError as exc:
        raise BadRequestError("Request body must be valid JSON") from exc
    if not isinstance(body, dict):
        raise BadRequestError("Request body must be a JSON object")
    return body


def _optional_str(body: dict[str, Any], field: str) -> str | None:
    value = body.get(field)
    if value is not None and not isinstance(value, str):
        raise BadRequestError(f"'{field}' must be a string")
    return value


def _list_query(body: dict[str, Any], config: AppConfig) -> ListQuery:
    max_keys = body.get("max_keys", config.max_keys)
    if isinstance(max_keys, bool) or not isinstance(max_keys, int) or max_keys <= 0:
        raise BadRequestError("'max_keys' must be a positive integer")
    return ListQuery(
        container_id=_optional_str(body, "bucket") or config.site_id,
        prefix=_optional_str(body, "prefix") or DEFAULT_PREFIX,
        max_keys=max_keys,
        search_query=_optional_str(body, "search_query") or None,
    )


def _object_address(body: dict[str, Any], config: AppConfig) -> ObjectAddress:
    key = _optional_str(body, "key")
    if not key:
        raise BadRequestError("'key' is required")
    return ObjectAddress(container_id=_optional_str(body, "bucket") or config.site_id, key=key)


def _error_response(exc: Exception) -> func.HttpResponse:
    """Map a failure to its status code with a plain-text description."""
    if isinstance(exc, BadRequestError):
        status_code = 400
    elif isinstance(exc, AccessDeniedError):
        status_code = 403
    elif isinstance(exc, ItemNotFoundError):
        status_code = 404
    else:
        status_code = 500
    return func.HttpResponse(str(exc), status_code=status_code, mimetype="text/plain")


@bp.route(route="status", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def status_check(req: func.HttpRequest) -> func.HttpResponse:
    """Status endpoint. Returns service status and version."""
    logger.info("[status_check] status requested")
    body = json.dumps({"status": "ok", "version": __version__})
    return func.HttpResponse(body, status_code=200, mimetype="application/json")


async def handle_list_objects(req: func.HttpRequest) -> func.HttpResponse:
    """ListObjectsV2 / search.

    Body: ``{"bucket": ..., "prefix": "/", "max_keys": 1000, "search_query": ...}``;
    every field is optional. Responds with a ListBucketResult document.
    """
    try:
        query = _list_query(_json_body(req), get_config())
        xml = await get_gateway().list_objects(query)
        return func.HttpResponse(xml, status_code=200, mimetype="application/xml")

    except (BadRequestError, GraphAuthError, GraphApiError) as exc:
        logger.error("[handle_list_objects] listing failed; error:%s", exc)
        return _error_response(exc)
    except Exception:
        logger.error("[handle_list_objects] listing failed", exc_info=True)
        return func.HttpResponse("Internal server error", status_code=500, mimetype="text/plain")


async def handle_get_object(req: func.HttpRequest) -> func.HttpResponse:
    """GetObject. Body: ``{"bucket": ..., "key": "docs/report.pdf"}``."""
    try:
        address = _object_address(_json_body(req), get_config())
        content = await get_gateway().get_object(address)
        return func.HttpResponse(
            content.data,
            status_code=200,
            headers={
                "Content-Type": content.content_type,
                "Content-Disposition": content.content_disposition,
            },
        )

    except (BadRequestError, AccessDeniedError, GraphAuthError, GraphApiError) as exc:
        logger.error("[handle_get_object] download failed; error:%s", exc)
        return _error_response(exc)
    except Exception:
        logger.error("[handle_get_object] download failed", exc_info=True)
        return func.HttpResponse("Internal server error", status_code=500, mimetype="text/plain")


async def handle_head_object(req: func.HttpRequest) -> func.HttpResponse:
    """HeadObject. Query: ``?bucket=...&key=docs/report.pdf``; answers with headers only.

    Served for the HEAD method, so ``Content-Length`` states the object size
    while the response carries no body.
    """
    try:
        address = _object_address(dict(req.params), get_config())
        result = await get_gateway().head_object(address)
        return func.HttpResponse(
            status_code=result.status_code,
            headers={
                "Content-Type": result.content_type,
                "Content-Length": str(result.size),
            },
        )

    except (BadRequestError, GraphAuthError, GraphApiError) as exc:
        logger.error("[handle_head_object] head failed; error:%s", exc)
        return _error_response(exc)
    except Exception:
        logger.error("[handle_head_object] head failed", exc_info=True)
        return func.HttpResponse("Internal server error", status_code=500, mimetype="text/plain")


@bp.route(route="listObjectsV2", methods=["POST"], auth_level=func.AuthLevel.FUNCTION)
async def list_objects_v2(req: func.HttpRequest) -> func.HttpResponse:
    logger.info("[list_objects_v2] listing requested")
    return await handle_list_objects(req)


@bp.route(route="getObject", methods=["POST"], auth_level=func.AuthLevel.FUNCTION)
async def get_object(req: func.HttpRequest) -> func.HttpResponse:
    logger.info("[get_object] object requested")
    return await handle_get_object(req)


@bp.route(route="headObject", methods=["HEAD"], auth_level=func.AuthLevel.FUNCTION)
async def head_object(req: func.HttpRequest) -> func.HttpResponse:
    logger.info("[head_object] head requested")
    return await handle_head_object(req)
