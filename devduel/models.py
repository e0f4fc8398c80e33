from .database import db
from datetime import datetime


class Battle(db.Model):
    """
    对战记录：只追加，不修改也不删除。
    排行榜和个人战绩都是对这张表的简单查询。
    """
    __tablename__ = 'battles'

    id = db.Column(db.Integer, primary_key=True)

    # 参战双方的 GitHub 用户名 (保留用户输入时的大小写)
    user1 = db.Column(db.String(64), index=True, nullable=False)
    user2 = db.Column(db.String(64), index=True, nullable=False)

    # 双方得分 (0-100)
    score1 = db.Column(db.Integer, nullable=False)
    score2 = db.Column(db.Integer, nullable=False)

    # 胜者用户名；平局时为 'tie'
    winner = db.Column(db.String(64), nullable=False)

    # 'recruiter' | 'founder'
    persona = db.Column(db.String(32), nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'user1': self.user1,
            'user2': self.user2,
            'score1': self.score1,
            'score2': self.score2,
            'winner': self.winner,
            'persona': self.persona,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }
