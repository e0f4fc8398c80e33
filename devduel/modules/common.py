# devduel/modules/common.py
# 各蓝图共用的小工具：取流水线实例、识别客户端、把结果转成 HTTP 响应

from functools import wraps

from flask import current_app, jsonify, request

# 流水线错误码 -> HTTP 状态码
STATUS_BY_CODE = {
    'invalid_input': 400,
    'not_found': 404,
    'rate_limited': 429,
    'upstream_auth': 503,
    'misconfigured': 503,
    'model_unavailable': 503,
    'unexpected': 500,
}


def get_pipeline():
    return current_app.extensions['analysis_pipeline']


def client_id_from_request() -> str:
    """客户端标识：X-Forwarded-For 第一个地址 > X-Real-IP > remote_addr"""
    forwarded = request.headers.get('X-Forwarded-For', '')
    first = forwarded.split(',')[0].strip()
    return first or request.headers.get('X-Real-IP') or request.remote_addr or 'anonymous'


def respond(result: dict):
    if result.get('success'):
        return jsonify(result), 200
    return jsonify(result), STATUS_BY_CODE.get(result.get('code'), 500)


def require_json_body(f):
    """请求体必须是 JSON 对象"""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or not data:
            return jsonify({
                "success": False,
                "error": "Request body must be a non-empty JSON object.",
                "code": "invalid_input"
            }), 400
        return f(*args, **kwargs)

    return decorated_function
