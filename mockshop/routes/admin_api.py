"""Data-layer administration: backend toggle, normalization, reseed."""
from datetime import datetime, timezone

from dotenv import set_key
from flask import Blueprint, current_app

from ..errors import ApiError
from ..extensions import data
from ..storage import DOCUMENT_STORE
from ..storage.normalize import normalize_all_collections
from ..storage.setup import rebuild_document_store
from ..utils.params import flag_arg
from ..utils.responses import success_response

bp = Blueprint("admin_api", __name__)

MODE_SETTING = "USE_DOCUMENT_STORE"


def _labels(use_document_store: bool) -> dict:
    return {
        "data_source": "Document store" if use_document_store else "Static snapshot",
        "mode": "read-write" if use_document_store else "read-only",
    }


def _db_stats(context):
    files = []
    for path in context.store.files():
        stat = path.stat()
        files.append({
            "name": path.name,
            "collection": path.stem,
            "size": stat.st_size,
            "modified": datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc).isoformat(),
        })
    return {"files": len(files), "file_details": files, "directory": str(context.db_dir)}


def persist_mode(use_document_store: bool):
    env_file = current_app.config["ENV_FILE"]
    env_file.parent.mkdir(parents=True, exist_ok=True)
    env_file.touch(exist_ok=True)
    set_key(str(env_file), MODE_SETTING, "true" if use_document_store else "false", quote_mode="never")


@bp.get("/admin/database/toggle")
def database_status():
    context = data.context
    enabled = context.mode == DOCUMENT_STORE
    return success_response({
        **_labels(enabled),
        "db_path": str(context.db_dir) if enabled else None,
        "db_stats": _db_stats(context) if enabled else None,
    })


@bp.post("/admin/database/toggle")
def toggle_database():
    """
    Flip between the document store and the static snapshot.

    The new setting is written to ENV_FILE so it survives restarts. With
    ``?reseed=true`` a switch to the document store first rebuilds every
    collection from the fixtures; if that fails the mode is left unchanged.
    """
    context = data.context
    previous = context.use_document_store
    target = not previous
    reseeded = []
    if target and flag_arg("reseed"):
        reseeded = rebuild_document_store(context)

    persist_mode(target)
    context.set_mode(target)
    current_app.logger.info("Database mode toggled: %s -> %s", previous, target)
    return success_response({
        "success": True,
        "previous_state": previous,
        "current_state": target,
        "message": f"Data source switched to {'document store' if target else 'static snapshot'}",
        "reseeded": reseeded,
        **_labels(target),
    })


@bp.post("/admin/database/normalize")
def normalize_database():
    context = data.context
    if not context.is_writable:
        raise ApiError("WRITE_NOT_ENABLED",
                       "Database normalization is only available when the document store is enabled")
    counts = normalize_all_collections(context)
    return success_response({
        "success": True,
        "message": "Database structure normalized successfully.",
        "normalized": counts,
    })


@bp.post("/admin/database/reset")
def reset_database():
    context = data.context
    if context.is_writable:
        collections = rebuild_document_store(context)
    else:
        context.reset_snapshots()
        collections = []
    return success_response({"success": True, "mode": context.mode, "reseeded": collections})
