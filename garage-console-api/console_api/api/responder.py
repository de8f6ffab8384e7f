# console_api/api/responder.py
from typing import Any

from flask import jsonify
from pydantic import BaseModel


def _dump(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump()
    if isinstance(data, (list, tuple)):
        return [_dump(item) for item in data]
    if isinstance(data, dict):
        return {key: _dump(value) for key, value in data.items()}
    return data


def success(message: str, data: Any = None, *, status: int = 200):
    return jsonify({"success": True, "message": message, "data": _dump(data)}), status


def failure(message: str, *, status: int, data: Any = None):
    return jsonify({"success": False, "message": message, "data": _dump(data)}), status
