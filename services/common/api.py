from typing import Any, Dict, Optional


SCHEMA_VERSION = "v1"


def ok_response(data: Dict[str, Any], meta: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "schema_version": SCHEMA_VERSION,
        "status": "ok",
        "data": data,
    }
    if meta is not None:
        payload["meta"] = meta
    return payload


def error_response(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "schema_version": SCHEMA_VERSION,
        "status": "error",
        "error": {
            "code": code,
            "message": message,
            "details": details or {},
        },
    }
