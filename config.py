import os
from dotenv import load_dotenv

# 加载 .env 文件中的环境变量
load_dotenv()


def _env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """基础配置类"""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'A_REALLY_BAD_SECRET_KEY'

    # --- 数据库配置 (MySQL) ---
    # 只用来保存对战记录；也可以直接用 DATABASE_URL 覆盖
    MYSQL_USER = os.environ.get('MYSQL_USER') or 'root'
    MYSQL_PASSWORD = os.environ.get('MYSQL_PASSWORD') or 'root'
    MYSQL_HOST = os.environ.get('MYSQL_HOST') or 'localhost'
    MYSQL_PORT = os.environ.get('MYSQL_PORT') or '3306'
    MYSQL_DB = os.environ.get('MYSQL_DB') or 'devduel'

    # SQLAlchemy 配置
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or (
        f"mysql+pymysql://{MYSQL_USER}:{MYSQL_PASSWORD}@{MYSQL_HOST}:{MYSQL_PORT}/{MYSQL_DB}"
    )
    # 禁用修改追踪，可以节省资源
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # ------------------- GitHub -------------------
    # 不填 Token 每小时只能请求 60 次；填入后可请求 5000 次。
    GITHUB_TOKEN = os.environ.get('GITHUB_TOKEN')
    GITHUB_API_BASE = os.environ.get('GITHUB_API_BASE') or 'https://api.github.com'

    # ------------------- 大模型 (OpenAI 兼容接口) -------------------
    OPENROUTER_API_KEY = os.environ.get('OPENROUTER_API_KEY')
    OPENROUTER_BASE_URL = os.environ.get('OPENROUTER_BASE_URL') or 'https://openrouter.ai/api/v1'
    AI_MODEL = os.environ.get('AI_MODEL') or 'openai/gpt-4o-mini'
    AI_MAX_RETRIES = int(os.environ.get('AI_MAX_RETRIES') or 2)
    AI_RETRY_BASE_DELAY = float(os.environ.get('AI_RETRY_BASE_DELAY') or 2.0)
    AI_TIMEOUT = int(os.environ.get('AI_TIMEOUT') or 60)

    # 评级阈值：总分 >= 70 为 Strong Hire，>= 45 为 Interview，其余为 Pass
    VERDICT_STRONG_HIRE = int(os.environ.get('VERDICT_STRONG_HIRE') or 70)
    VERDICT_INTERVIEW = int(os.environ.get('VERDICT_INTERVIEW') or 45)

    # ------------------- Demo 模式 -------------------
    # 打开后完全不访问 GitHub 和大模型，直接返回预置数据
    DEMO_MODE = _env_bool('DEMO_MODE')
    DEMO_USERNAMES = tuple(
        name.strip() for name in (os.environ.get('DEMO_USERNAMES') or 'demo,test').split(',') if name.strip()
    )
    DEMO_DELAY_SECONDS = float(os.environ.get('DEMO_DELAY_SECONDS') or 1.5)

    # ------------------- 限流 & 缓存 -------------------
    RATE_LIMIT_MAX_REQUESTS = int(os.environ.get('RATE_LIMIT_MAX_REQUESTS') or 5)
    RATE_LIMIT_WINDOW_SECONDS = float(os.environ.get('RATE_LIMIT_WINDOW_SECONDS') or 60)
    ANALYSIS_CACHE_TTL = int(os.environ.get('ANALYSIS_CACHE_TTL') or 10 * 60)  # 单人分析缓存 10 分钟
    COMPARE_CACHE_TTL = int(os.environ.get('COMPARE_CACHE_TTL') or 24 * 60 * 60)  # 对战结果缓存 24 小时

    LOG_LEVEL = os.environ.get('LOG_LEVEL') or 'INFO'


class DevelopmentConfig(Config):
    """开发环境配置"""
    DEBUG = True  # 开启调试模式


class ProductionConfig(Config):
    """生产环境配置"""
    DEBUG = False


class TestingConfig(Config):
    """测试配置：内存 SQLite，不访问任何外部服务"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    GITHUB_TOKEN = None
    OPENROUTER_API_KEY = 'test-key'
    AI_RETRY_BASE_DELAY = 0
    DEMO_MODE = False
    DEMO_DELAY_SECONDS = 0
    LOG_LEVEL = 'WARNING'


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
