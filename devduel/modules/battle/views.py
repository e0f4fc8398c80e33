# devduel/modules/battle/views.py

import time

from flask import jsonify, request

from devduel.modules.battle import battle_bp
from devduel.modules.common import client_id_from_request, get_pipeline, require_json_body, respond
from devduel.utils import extract_username

MAX_RECENT_LIMIT = 100


# ============ 主要路由 ============
@battle_bp.route('/compare', methods=['POST'])
@require_json_body
def compare_players():
    """
    对战接口
    前端发送 JSON: { "player1": "github_id_1", "player2": "github_id_2", "persona": "recruiter" }
    返回: { "success": true, "data": {winner, winner_reason, head_to_head, user1_stats, ...}, "cached": false }
    """
    data = request.get_json()
    result = get_pipeline().perform_comparison(
        data.get('player1'),
        data.get('player2'),
        persona=data.get('persona', 'recruiter'),
        client_id=client_id_from_request(),
    )
    return respond(result)


# ============ 排行榜：全站最近对战 ============
@battle_bp.route('/recent', methods=['GET'])
def recent_battles():
    limit = request.args.get('limit', 20, type=int)
    limit = max(1, min(limit, MAX_RECENT_LIMIT))

    battles = get_pipeline().battle_store.list_recent(limit)
    return jsonify({
        "success": True,
        "battles": [b.to_dict() for b in battles]
    }), 200


# ============ 个人战绩 ============
@battle_bp.route('/history/<string:username>', methods=['GET'])
def battle_history(username):
    name = extract_username(username)
    if not name:
        return jsonify({
            "success": False,
            "error": "Please enter a valid GitHub username or profile URL.",
            "code": "invalid_input"
        }), 400

    store = get_pipeline().battle_store
    return jsonify({
        "success": True,
        "username": name,
        "stats": store.stats_for(name),
        "battles": [b.to_dict() for b in store.list_for(name)]
    }), 200


# ============ 健康检查路由 ============
@battle_bp.route('/health', methods=['GET'])
def health_check():
    """健康检查接口"""
    return jsonify({
        "status": "healthy",
        "service": "battle_arena",
        "version": "2.0",
        "timestamp": int(time.time())
    }), 200
