# devduel/__init__.py

import logging

from flask import Flask
from flask_cors import CORS

from config import config
from .database import db


def create_app(config_name='default', pipeline=None):
    """
    Flask 应用工厂函数。
    pipeline 允许测试时注入自定义的流水线 (假的抓取器 / 分析器)。
    """
    app = Flask(__name__)

    # 1. 加载配置
    app.config.from_object(config[config_name])

    # 2. 日志：各模块使用 logging.getLogger(__name__)，这里统一配置一次
    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    # 3. 注册数据库扩展
    db.init_app(app)

    # 4. 组装分析流水线 (缓存 / 限流器都挂在进程级别的这个实例上)
    if pipeline is None:
        from .services.analysis_pipeline import build_pipeline
        pipeline = build_pipeline(app.config)
    app.extensions['analysis_pipeline'] = pipeline

    # 5. 注册蓝图 (Blueprint)
    from .modules.analysis import analysis_bp
    from .modules.battle import battle_bp
    app.register_blueprint(analysis_bp)
    app.register_blueprint(battle_bp)

    # 6. 注册 CORS 扩展
    CORS(app, supports_credentials=True)

    # 简单的测试路由
    @app.route('/')
    def index():
        return 'Welcome to DevDuel: GitHub hiring signals and head-to-head battles!'

    return app
