from flask import request

from devduel.modules.analysis import analysis_bp
from devduel.modules.common import client_id_from_request, get_pipeline, require_json_body, respond


# ---------------------------------------------------------
# 路由：单人分析
# POST /api/analyze            JSON: { "username": "...", "persona": "recruiter" }
# GET  /api/analyze/<username>?persona=founder
# ---------------------------------------------------------
@analysis_bp.route('', methods=['POST'])
@require_json_body
def analyze_profile():
    data = request.get_json()
    result = get_pipeline().perform_analysis(
        data.get('username'),
        persona=data.get('persona', 'recruiter'),
        client_id=client_id_from_request(),
    )
    return respond(result)


@analysis_bp.route('/<string:username>', methods=['GET'])
def analyze_profile_by_name(username):
    result = get_pipeline().perform_analysis(
        username,
        persona=request.args.get('persona', 'recruiter'),
        client_id=client_id_from_request(),
    )
    return respond(result)
