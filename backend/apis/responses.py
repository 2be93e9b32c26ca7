# backend/apis/responses.py
import json
from typing import Any

from fastapi.responses import JSONResponse


def fail(msg: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "FAIL", "statusCode": status_code, "message": msg, "data": ""},
    )


def success(data: Any, message: str = "") -> dict:
    # 'data' stays a STRING per the API contract
    data_str = data if isinstance(data, str) else json.dumps(data, ensure_ascii=False)
    return {"status": "SUCCESS", "statusCode": 200, "message": message, "data": data_str}
