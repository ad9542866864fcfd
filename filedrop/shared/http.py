from typing import Any


class ApiError(Exception):
    def __init__(self, message: str, status: int = 400):
        super().__init__(message)
        self.message = message
        self.status = status


def ok(**fields: Any) -> dict:
    return {"success": True, **fields}

def err(message: str, status: int = 400):
    # raise to short-circuit; main.py renders it as {"success": false, "error": ...}
    raise ApiError(message, status)

def error_body(message: str) -> dict:
    return {"success": False, "error": message}
