# devduel/modules/battle/__init__.py

from flask import Blueprint

# 对战蓝图：对战 + 排行榜 + 个人战绩，URL 前缀为 /api/battle
battle_bp = Blueprint('battle', __name__, url_prefix='/api/battle')

# 导入 views 文件，将路由注册到蓝图上
from . import views
