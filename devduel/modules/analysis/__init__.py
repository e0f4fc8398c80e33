from flask import Blueprint

# 单人分析蓝图，URL 前缀为 /api/analyze
analysis_bp = Blueprint('analysis', __name__, url_prefix='/api/analyze')

from . import views
