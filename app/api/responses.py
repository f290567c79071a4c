"""
Response envelope shared by every endpoint: ``{success, message?, ...payload}``.

The payload is spread as named keys (``contract``, ``contracts``,
``payment``, ``time_entry`` ...). Reports answer under ``data``.

Errors use the same envelope with ``success: false``; see the exception
handlers in ``app.main``.
"""
from typing import Any, Dict, Optional


def ok(message: Optional[str] = None, **payload: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    body.update(payload)
    return body


def fail(message: str, **extra: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "message": message}
    body.update(extra)
    return body
