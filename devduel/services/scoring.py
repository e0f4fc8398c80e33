"""
Pure normalization rules applied to everything the language model returns.

The generator is unreliable, so nothing it produces is trusted as-is:
scores are clamped, a missing total is rebuilt from the dimensions and an
invalid verdict is derived from the score thresholds. Anything that cannot
be repaired raises ValueError so the caller can retry.
"""

import json
import math
import re
from typing import Dict, Optional

from devduel.schemas import (
    AnalysisResult, CompareResult, DimensionScore, DualAnalysisResult, UserStats,
    DIMENSION_KEYS, HEAD_TO_HEAD_CHOICES, HEAD_TO_HEAD_KEYS, VERDICTS, WINNER_CHOICES,
)
from .personas import PERSONAS, Persona, VerdictThresholds

MAX_FEEDBACK_ITEMS = 5

_FENCED_BLOCK = re.compile(r'```(?:json)?\s*([\s\S]*?)```')
_BRACES = re.compile(r'\{.*\}', re.DOTALL)


def extract_json(raw: str) -> dict:
    """
    从模型输出中解析 JSON 对象，兼容 ```json 代码块包裹和前后多余文字。
    解析失败抛 ValueError。
    """
    if not raw or not raw.strip():
        raise ValueError("Empty response from AI")

    text = raw.strip()
    fenced = _FENCED_BLOCK.search(text)
    if fenced:
        text = fenced.group(1).strip()

    try:
        result = json.loads(text)
    except json.JSONDecodeError:
        braces = _BRACES.search(text)
        if not braces:
            raise ValueError("No JSON object found in AI response")
        result = json.loads(braces.group(0))

    if not isinstance(result, dict):
        raise ValueError("AI response is not a JSON object")
    return result


def _to_number(value) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def clamp_score(value, low: int, high: int) -> int:
    """四舍五入并限制到 [low, high]；非数字按 low 处理"""
    number = _to_number(value)
    if number is None:
        return low
    return max(low, min(high, int(math.floor(number + 0.5))))


def recompute_total(dimensions: Dict[str, DimensionScore]) -> int:
    """五个维度 (0-10) 之和乘 2，映射到 0-100"""
    return min(100, 2 * sum(d.score for d in dimensions.values()))


def derive_verdict(total_score: int, thresholds: VerdictThresholds = VerdictThresholds()) -> str:
    if total_score >= thresholds.strong_hire:
        return 'Strong Hire'
    if total_score >= thresholds.interview:
        return 'Interview'
    return 'Pass'


def _dimension(raw) -> DimensionScore:
    if not isinstance(raw, dict):
        return DimensionScore(score=0, comment='')
    return DimensionScore(score=clamp_score(raw.get('score'), 0, 10), comment=str(raw.get('comment') or ''))


def validate_analysis(raw: dict, thresholds: VerdictThresholds = VerdictThresholds()) -> AnalysisResult:
    if not isinstance(raw, dict):
        raise ValueError("Analysis result must be a JSON object")

    raw_dims = raw.get('dimensions') if isinstance(raw.get('dimensions'), dict) else {}
    dimensions = {key: _dimension(raw_dims.get(key)) for key in DIMENSION_KEYS}

    # 兼容旧字段 score
    raw_total = raw.get('total_score', raw.get('score'))
    number = _to_number(raw_total)
    if not number:
        total_score = recompute_total(dimensions)
    else:
        total_score = clamp_score(number, 0, 100)

    verdict = raw.get('recruiter_verdict', raw.get('verdict'))
    if verdict not in VERDICTS:
        verdict = derive_verdict(total_score, thresholds)

    feedback = raw.get('actionable_feedback')
    if not isinstance(feedback, list):
        feedback = []

    return AnalysisResult(
        total_score=total_score,
        summary=str(raw.get('summary') or ''),
        dimensions=dimensions,
        verdict=verdict,
        role_fit=str(raw.get('role_fit') or ''),
        actionable_feedback=[str(item) for item in feedback][:MAX_FEEDBACK_ITEMS],
    )


def validate_dual_analysis(raw: dict, personas: Dict[str, Persona] = None) -> DualAnalysisResult:
    personas = personas or PERSONAS
    if not isinstance(raw.get('recruiter'), dict) or not isinstance(raw.get('founder'), dict):
        raise ValueError("AI did not return both recruiter and founder perspectives")

    return DualAnalysisResult(
        recruiter=validate_analysis(raw['recruiter'], personas['recruiter'].thresholds),
        founder=validate_analysis(raw['founder'], personas['founder'].thresholds),
    )


def _user_stats(raw, label: str) -> UserStats:
    if not isinstance(raw, dict):
        raise ValueError(f"AI response is missing {label}")
    insight = raw.get('deep_scan_insight')
    return UserStats(
        score=clamp_score(raw.get('score'), 0, 100),
        top_repo=str(raw.get('top_repo') or ''),
        deep_scan_insight=str(insight) if insight else None,
    )


def validate_comparison(raw: dict, username1: str, username2: str, persona: str) -> CompareResult:
    """
    对战结果校验：两方分数各自限制到 [0,100]；
    winner 必须是 user1 / user2 / tie，head_to_head 每一项必须是 user1 或 user2，否则视为无效结果。
    """
    winner = raw.get('winner')
    if not isinstance(winner, str) or winner.strip().lower() not in WINNER_CHOICES:
        raise ValueError(f"AI returned an invalid winner: {winner!r}")

    head_to_head = raw.get('head_to_head')
    if not isinstance(head_to_head, dict):
        raise ValueError("AI response is missing head_to_head")
    missing = [key for key in HEAD_TO_HEAD_KEYS if not head_to_head.get(key)]
    if missing:
        raise ValueError(f"AI response is missing head_to_head fields: {', '.join(missing)}")
    # 每一项都必须指向两位选手之一，否则对称缓存命中时无法镜像
    sides = {key: str(head_to_head[key]).strip().lower() for key in HEAD_TO_HEAD_KEYS}
    invalid = [key for key, side in sides.items() if side not in HEAD_TO_HEAD_CHOICES]
    if invalid:
        raise ValueError(f"AI returned invalid head_to_head values for: {', '.join(invalid)}")

    return CompareResult(
        winner=winner.strip().lower(),
        winner_reason=str(raw.get('winner_reason') or ''),
        head_to_head=sides,
        user1_stats=_user_stats(raw.get('user1_stats'), 'user1_stats'),
        user2_stats=_user_stats(raw.get('user2_stats'), 'user2_stats'),
        user1_username=username1,
        user2_username=username2,
        persona=persona,
    )


def winner_matches_scores(result: CompareResult) -> bool:
    """模型宣布的胜者是否与分数高低一致 (只用于告警，不做纠正)"""
    score1, score2 = result.user1_stats.score, result.user2_stats.score
    if result.winner == 'tie':
        return True
    if result.winner == 'user1':
        return score1 >= score2
    return score2 >= score1
