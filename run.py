import os
from devduel import create_app
from devduel.database import db
from devduel import models

# 默认使用开发配置，可以用 FLASK_CONFIG 切换
app = create_app(os.environ.get('FLASK_CONFIG') or 'default')


# ----------------- 数据库初始化（CLI 命令） -----------------
@app.cli.command("init_db")
def init_db_command():
    with app.app_context():
        # 创建 battles 表
        db.create_all()
        print('✅ 数据库初始化完成!')


# ---------------------------------------------------------------


if __name__ == '__main__':
    # Flask 自带的开发服务器启动
    app.run(host='0.0.0.0', port=int(os.environ.get('PORT') or 5000))
