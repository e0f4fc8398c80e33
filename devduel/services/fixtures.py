# devduel/services/fixtures.py
# 预置的演示数据：demo 模式直接返回，线上分析全部失败时作为兜底。

from datetime import datetime, timezone

from devduel.schemas import (
    AnalysisResult, CompareResult, DeepScan, DimensionScore, DualAnalysisResult, GitHubUser, Profile,
    Repository, UserStats,
)

FALLBACK_NOTE = "(System Note: Live analysis failed. Showing demo data.)"

MOCK_DUAL = DualAnalysisResult(
    recruiter=AnalysisResult(
        total_score=57,
        summary=("Candidate shows foundational understanding of modern web technologies but lacks "
                 "production-grade engineering signals. No test suites, no CI/CD pipelines, and "
                 "documentation is surface-level. Would need significant mentorship."),
        role_fit="Junior Dev",
        dimensions={
            'documentation': DimensionScore(4, "READMEs are install-only. No architecture context or design rationale."),
            'code_structure': DimensionScore(6, "Reasonable folder structure but no evidence of design patterns or abstractions."),
            'consistency': DimensionScore(5, "Sporadic commit frequency with multi-week gaps."),
            'impact': DimensionScore(4, "Portfolio projects only. No evidence of real-world users or problem-solving."),
            'technical_depth': DimensionScore(7, "Competent with Next.js and TypeScript. Missing backend and infrastructure depth."),
        },
        verdict="Interview",
        actionable_feedback=[
            "Add Jest/Vitest tests to at least one project; this alone would boost your score by 10+ points.",
            "Set up GitHub Actions CI/CD to demonstrate DevOps awareness.",
            "Expand READMEs with architecture decisions, not just setup instructions.",
        ],
    ),
    founder=AnalysisResult(
        total_score=73,
        summary=("This person ships. Multiple finished projects, some with live deployment links. "
                 "Not overthinking it, just building. Exactly the mentality a seed-stage startup needs."),
        role_fit="Indie Hacker",
        dimensions={
            'documentation': DimensionScore(6, "Good enough to onboard someone quickly. Functional, not fancy."),
            'code_structure': DimensionScore(5, "Scrappy but it works. Not enterprise-grade, but who cares at this stage."),
            'consistency': DimensionScore(7, "Regular commits show a builder mentality. Keeps iterating."),
            'impact': DimensionScore(8, "Deployed apps that solve real problems. User-centric thinking."),
            'technical_depth': DimensionScore(6, "Pragmatic stack choices. Ships with Next.js, doesn't overthink."),
        },
        verdict="Interview",
        actionable_feedback=[
            "Add analytics to deployed apps and showcase real user numbers.",
            "Build one project with payments or auth to prove full-stack chops.",
            "Write a 'How I Built This' post to flex product thinking.",
        ],
    ),
)


def fallback_dual() -> DualAnalysisResult:
    """线上分析失败时的兜底结果：带 is_mock_data 标记并在 summary 前加提示"""
    return DualAnalysisResult(
        recruiter=MOCK_DUAL.recruiter.as_fallback(FALLBACK_NOTE),
        founder=MOCK_DUAL.founder.as_fallback(FALLBACK_NOTE),
    )


def demo_profile(handle: str) -> Profile:
    repo = Repository(
        name="portfolio-site",
        description="Personal portfolio built with Next.js and Tailwind",
        language="TypeScript",
        stars=12,
        topics=("nextjs", "portfolio"),
        homepage="https://example.com",
    )
    return Profile(
        user=GitHubUser(login=handle, name="Demo Developer", bio="Student and aspiring full-stack developer",
                        followers=42, public_repos=18),
        repos=(repo,),
        deep_scan=DeepScan(top_repo_name=repo.name, readme="# portfolio-site\n\nMy personal site.",
                           manifest_path="package.json", manifest='{"dependencies": {"next": "14.0.0"}}'),
        fetched_at=datetime.now(timezone.utc).isoformat(),
    )


def demo_comparison(username1: str, username2: str, persona: str) -> CompareResult:
    """
    对战演示数据。始终带 is_mock_data 标记：
    在两个真实用户之间宣布一个虚构的胜者是不可接受的，所以它既不进缓存也不落库。
    """
    return CompareResult(
        winner='user1',
        winner_reason="Demo mode: user1 ships more often and documents their work better.",
        head_to_head={'velocity': 'user1', 'quality': 'user2', 'impact': 'user1'},
        user1_stats=UserStats(score=MOCK_DUAL.founder.total_score, top_repo="portfolio-site",
                              deep_scan_insight="A deployed Next.js portfolio with a clean README."),
        user2_stats=UserStats(score=MOCK_DUAL.recruiter.total_score, top_repo="todo-app",
                              deep_scan_insight="A tidy to-do app with no tests or CI."),
        user1_username=username1,
        user2_username=username2,
        persona=persona,
        is_mock_data=True,
    )
