# devduel/services/battle_service.py

import logging

from sqlalchemy import func, or_

from devduel.database import db
from devduel.models import Battle

logger = logging.getLogger(__name__)


class BattleStore:
    """
    对战记录服务：负责写入对战结果，
    并为排行榜 / 个人战绩页面提供只读查询。
    """

    def record_battle(self, user1: str, user2: str, score1: int, score2: int, winner: str, persona: str):
        """
        追加一条对战记录。写库失败只记录日志，不影响已经生成的对战结果。
        """
        try:
            battle = Battle(user1=user1, user2=user2, score1=score1, score2=score2,
                            winner=winner, persona=persona)
            db.session.add(battle)
            db.session.commit()
            logger.info(f"[Battle] Recorded #{battle.id}: {user1} vs {user2} -> {winner}")
            return battle
        except Exception:
            db.session.rollback()
            logger.exception(f"[Battle] Failed to record {user1} vs {user2}")
            return None

    def list_recent(self, limit: int = 20) -> list:
        """全站最近的对战，最新的在前"""
        return (Battle.query
                .order_by(Battle.created_at.desc(), Battle.id.desc())
                .limit(limit)
                .all())

    def list_for(self, username: str) -> list:
        """某个用户参与过的全部对战 (两侧都匹配，忽略大小写)"""
        name = username.lower()
        return (Battle.query
                .filter(or_(func.lower(Battle.user1) == name, func.lower(Battle.user2) == name))
                .order_by(Battle.created_at.desc(), Battle.id.desc())
                .all())

    def stats_for(self, username: str) -> dict:
        battles = self.list_for(username)
        total = len(battles)
        victories = sum(1 for b in battles if b.winner.lower() == username.lower())
        return {
            'total_battles': total,
            'victories': victories,
            'win_rate': round(victories / total * 100) if total > 0 else 0
        }
