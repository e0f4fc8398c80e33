from flask_sqlalchemy import SQLAlchemy

# 全局 db 实例，模型 (Battle) 和 BattleStore 都从这里导入
db = SQLAlchemy()

# 这里不连接数据库；create_app 中调用 db.init_app(app) 后才绑定到具体的 SQLALCHEMY_DATABASE_URI
