"""
Document profiles: the per-client templates that drive page synthesis and entity
candidates. A profile is resolved once per upload from the file name.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class PageTemplate:
    """Curated content for one page of a known document."""
    title: str
    text: str
    subtitle: str = ""
    page_type: Optional[str] = None
    intent: Optional[str] = None
    keywords: Tuple[str, ...] = ()
    ai_keywords: Tuple[str, ...] = ()
    consulting_insights: Tuple[str, ...] = ()
    summary: str = ""


@dataclass(frozen=True)
class DocumentProfile:
    """
    Everything the pipeline needs to know about a family of documents.

    filename_markers: lower-cased substrings that select this profile
    pinned_pages: fixed page count, bypassing the size based estimate
    pages: curated page templates, page 1 first
    filler_topics: titles for pages beyond the curated ones
    derive_candidates: take entity candidates from the analysed pages
    """
    key: str
    filename_markers: Tuple[str, ...]
    default_filename: str
    title: Optional[str]
    report_name: Optional[str]
    extracted_from: Optional[str]
    pinned_pages: Optional[int]
    pages: Tuple[PageTemplate, ...]
    filler_topics: Tuple[str, ...]
    ai_keywords: Tuple[str, ...]
    consulting_insights: Tuple[str, ...]
    main_topics: Tuple[str, ...]
    insight_impact: str = "Medium"
    keyword_strength: float = 0.8
    insight_strength: float = 0.7
    page_radius: Optional[float] = None
    keyword_radius: Optional[float] = None
    insight_radius: Optional[float] = None
    page_z_step: Optional[float] = None
    derive_candidates: bool = False
    filler_text: str = "{topic}에 대한 상세 분석 및 전략 방향"

    def matches(self, file_name: str) -> bool:
        low = file_name.lower()
        return any(marker in low for marker in self.filename_markers)

    def page_template(self, page_number: int, document_title: str) -> PageTemplate:
        """
        Returns the curated template for a page, or builds one from the filler topics.

        Args:
            page_number (int): 1-based page number.
            document_title (str): Title used in generated subtitles.

        Returns:
            PageTemplate: Template for the page.
        """
        if 1 <= page_number <= len(self.pages):
            return self.pages[page_number - 1]
        filler_index = page_number - len(self.pages) - 1
        if filler_index < len(self.filler_topics):
            topic = self.filler_topics[filler_index]
        else:
            topic = f"Page {page_number}"
        subtitle = f"{document_title} - {topic}"
        text = "\n".join([
            topic,
            subtitle,
            self.filler_text.format(topic=topic),
        ])
        return PageTemplate(title=topic, subtitle=subtitle, text=text)


# ─────────────────────────────────────────────────────────────
# Samsung DX SCM proposal
# ─────────────────────────────────────────────────────────────

SAMSUNG_PROFILE = DocumentProfile(
    key="samsung",
    filename_markers=("삼성", "samsung", "dx scm", "dx_scm"),
    default_filename="samsung_dx_scm.pdf",
    title=None,
    report_name="삼성전자 DX SCM 생성형 AI 제안서",
    extracted_from="삼성전자 DX SCM 제안서",
    pinned_pages=5,
    pages=(
        PageTemplate(
            title="삼성전자 DX SCM 생성형 AI 제안서",
            text="삼성전자 DX SCM 생성형 AI 제안서\n삼성전자 DX SCM 생성형 AI 기반 SCM 데이터 조회 MVP 구축",
            page_type="cover",
            keywords=("삼성전자", "DX", "SCM", "생성형 AI", "MVP"),
            ai_keywords=("Generative AI", "SCM", "Data Analytics"),
            consulting_insights=("PoC 구축", "업무 프로세스 최적화", "AI 도입 전략"),
            summary="PwC의 삼성전자 DX SCM 생성형 AI 기반 데이터 조회 서비스 PoC 제안서 표지",
        ),
        PageTemplate(
            title="Agenda",
            text="Agenda\nI. 제안 개요 II. 수행 범위 III. 사업 관리 IV. 제안사 소개",
            page_type="toc",
            keywords=("제안개요", "수행범위", "사업관리", "제안사소개"),
            ai_keywords=("Project Scope", "Service Delivery", "Implementation"),
            consulting_insights=("프로젝트 구조화", "단계별 접근법", "체계적 제안"),
            summary="제안서의 전체 구성과 진행 순서를 나타내는 아젠다",
        ),
        PageTemplate(
            title="프로젝트 추진 목표",
            text="프로젝트 추진 목표\nGen AI 기반 내/외부 데이터의 업무 활용을 극대화하여 NSCM 시스템의 사용성 제고",
            page_type="content",
            keywords=("Gen AI", "NSCM", "AI Orchestrator", "Multi Agent"),
            ai_keywords=("Multi Agent", "AI Orchestrator", "NSCM"),
            consulting_insights=("사용성 제고", "시스템 통합", "데이터 활용"),
            summary="Gen AI를 활용한 SCM 데이터 활용 극대화 및 NSCM 시스템 사용성 제고 방안",
        ),
        PageTemplate(
            title="구현 계획",
            text="구현 계획\n3단계 구현 계획: Phase 1, Phase 2, Phase 3",
            page_type="content",
            keywords=("구현계획", "Phase", "단계별", "로드맵"),
            ai_keywords=("Roadmap", "Phase Management", "Milestone"),
            consulting_insights=("위험 관리", "품질 보증", "성과 측정"),
            summary="3단계로 구성된 체계적인 구현 계획 및 로드맵",
        ),
        PageTemplate(
            title="기대 효과",
            text="기대 효과\n업무 효율성 향상 및 의사결정 품질 개선",
            page_type="content",
            keywords=("기대효과", "업무효율성", "의사결정", "품질개선"),
            ai_keywords=("ROI", "Efficiency", "Optimization"),
            consulting_insights=("변화 관리", "지속적 개선", "가치 실현"),
            summary="프로젝트 완료 후 예상되는 업무 효율성 향상 및 기대 효과",
        ),
    ),
    filler_topics=(),
    ai_keywords=(
        "Generative AI", "SCM", "Multi Agent", "NSCM", "AI Orchestrator",
        "Digital Transformation", "Data Analytics", "Machine Learning",
        "Process Automation", "Business Intelligence", "Cloud Computing",
    ),
    consulting_insights=(
        "PoC 구축", "업무 프로세스 최적화", "AI 도입 전략", "사용성 제고",
        "프로젝트 구조화", "단계별 접근법", "체계적 제안", "비용 효율성",
        "리스크 관리", "성과 측정", "변화 관리",
    ),
    main_topics=("Gen AI", "SCM", "Multi Agent", "NSCM", "AI Orchestrator"),
    insight_impact="Medium",
    insight_strength=0.7,
    page_radius=600.0,
    keyword_radius=1000.0,
    insight_radius=1200.0,
    page_z_step=40.0,
)


# ─────────────────────────────────────────────────────────────
# Lotte Chemical AI/DT roadmap report
# ─────────────────────────────────────────────────────────────

LOTTE_PROFILE = DocumentProfile(
    key="lotte",
    filename_markers=("롯데케미칼", "aidt"),
    default_filename="롯데케미칼 AIDT로드맵_종료보고_v0.93.pdf",
    title="롯데케미칼 AI/DT 로드맵",
    report_name="롯데케미칼 AI/DT 로드맵 보고서",
    extracted_from="롯데케미칼 AI/DT 로드맵 보고서",
    pinned_pages=28,
    pages=(
        PageTemplate(
            title="롯데케미칼 현장 중심 AI/DT 과제 로드맵 수립",
            subtitle="종료보고",
            text="롯데케미칼 현장 중심 AI/DT 과제 로드맵 수립\n\n종료보고\n\nAI Tech부 AI 컨설팅팀\n- 2024. 07. 25.",
            page_type="cover",
            intent="inform",
            keywords=("롯데케미칼", "AI/DT", "로드맵", "종료보고", "AI Tech부"),
            ai_keywords=("Digital Transformation", "AI Strategy", "Roadmap Planning"),
            consulting_insights=("현장 중심 접근법", "AI 컨설팅", "로드맵 수립"),
            summary="롯데케미칼 AI Tech부에서 수행한 현장 중심 AI/DT 과제 로드맵 수립 프로젝트의 최종 종료보고서",
        ),
        PageTemplate(
            title="CONTENTS",
            subtitle="Data AI Tech",
            text=(
                "CONTENTS\n\nPart 01. 컨설팅 활동 보고\n- 1. Executive Summary\n- 2. 추진 경과\n\n"
                "Part 02. 컨설팅 중간 결과 보고\n- 1. AI/DT 지향점\n- 2. To-Be 변화 방향\n"
                "- 3. 추진 로드맵\n- 4. 이행 계획"
            ),
            page_type="toc",
            intent="inform",
            keywords=("컨설팅", "활동보고", "중간결과", "현황분석", "추진경과", "이행계획"),
            ai_keywords=("Executive Summary", "Consulting Process", "Strategic Analysis"),
            consulting_insights=("체계적 구조", "단계별 접근", "종합적 분석"),
            summary="Executive Summary부터 이행계획까지 AI/DT 컨설팅의 전 과정을 체계적으로 구성한 목차",
        ),
        PageTemplate(
            title="Part 01. 컨설팅 활동 보고",
            subtitle="롯데케미칼 현장 중심 AI/DT 과제 로드맵 수립",
            text="Part. 01\n\n컨설팅 활동 보고\n\n롯데케미칼 현장 중심 AI/DT 과제 로드맵 수립",
            page_type="content",
            intent="inform",
            keywords=("컨설팅", "활동보고", "Part01"),
            ai_keywords=("Consulting Activities", "Reporting", "Project Management"),
            consulting_insights=("활동 투명성", "진행 현황 공유", "프로세스 관리"),
            summary="Part 01 컨설팅 활동 보고 섹션의 시작으로, 현장 중심 AI/DT 로드맵 수립을 위한 체계적 접근",
        ),
        PageTemplate(
            title="Executive Summary",
            subtitle="5대 AI/DT 모델 및 10대 추진과제",
            text=(
                "Executive Summary\n\n"
                "[ 현장 중심 AI/DT 과제 로드맵 수립 ]을 목표로, 현장 인터뷰와 벤치마킹에 기반한 "
                "AI/DT의 지향점과 추진방향을 도출하였습니다.\n\n"
                "현장 인터뷰와 임원 면담 결과, 롯데케미칼 고유의 AI 모델 구현을 통한 본원 경쟁력 강화 및 "
                "일하는 방식의 근본적인 혁신 Vision으로 통합 의사결정 체계, 지능형 R&D 체계, Digital Plant, "
                "Commercial Excellence, 생성형 AI기반 지식공유체계의 5대 AI/DT 모델을 지향점으로 수립하고,\n\n"
                "최적 의사결정을 통한 수익성 극대화를 목표로 10대 추진과제를 정의하였습니다."
            ),
            page_type="summary",
            intent="persuade",
            keywords=(
                "Executive Summary", "현장중심", "5대 AI/DT모델", "통합의사결정체계", "지능형R&D",
                "Digital Plant", "Commercial Excellence", "생성형AI", "지식공유체계", "10대추진과제",
                "수익성극대화",
            ),
            ai_keywords=(
                "Field-Centered AI", "Decision Support System", "Intelligent R&D",
                "Smart Manufacturing", "Generative AI",
            ),
            consulting_insights=(
                "현장 인터뷰 기반 분석", "벤치마킹 활용", "5대 모델 체계화", "10대 과제 구체화",
                "수익성 중심 목표 설정",
            ),
            summary="현장 인터뷰와 벤치마킹을 통해 롯데케미칼 고유의 5대 AI/DT 모델과 10대 추진과제를 정의하여 수익성 극대화 달성",
        ),
    ),
    filler_topics=(
        "추진 경과", "현황 분석", "AI/DT 지향점", "To-Be 변화 방향", "추진 로드맵",
        "이행 계획", "통합 의사결정 체계", "지능형 R&D 체계", "Digital Plant",
        "Commercial Excellence", "생성형 AI 기반 지식공유", "기술 아키텍처",
        "데이터 거버넌스", "보안 체계", "조직 운영 모델", "인력 양성 계획",
        "예산 및 투자 계획", "성과 측정 체계", "리스크 관리", "변화 관리",
        "파트너십 전략", "기술 도입 계획", "POC 추진 방안", "확산 전략",
    ),
    ai_keywords=(
        "Field-Centered AI", "Digital Transformation", "AI Strategy", "Roadmap Planning",
        "Decision Support System", "Intelligent R&D", "Digital Plant", "Commercial Excellence",
        "Smart Manufacturing", "Generative AI", "Knowledge Management", "Process Optimization",
        "Data Analytics", "AI Tech",
    ),
    consulting_insights=(
        "현장 중심 접근법", "체계적 로드맵 수립", "5대 AI/DT 모델 체계화", "10대 추진과제 구체화",
        "수익성 중심 목표 설정", "벤치마킹 기반 분석", "현장 인터뷰 활용", "통합 의사결정 체계",
        "지능형 R&D 전략", "Digital Plant 구현", "Commercial Excellence", "생성형 AI 지식공유",
        "AI Tech부 전문성", "이행 계획 수립",
    ),
    main_topics=("통합 의사결정 체계", "지능형 R&D", "Digital Plant", "Commercial Excellence", "생성형 AI 지식공유"),
    insight_impact="High",
    insight_strength=0.75,
    page_radius=800.0,
    keyword_radius=900.0,
    insight_radius=1100.0,
    page_z_step=20.0,
)


# ─────────────────────────────────────────────────────────────
# Anything else
# ─────────────────────────────────────────────────────────────

GENERIC_PROFILE = DocumentProfile(
    key="generic",
    filename_markers=(),
    default_filename="document.pdf",
    title=None,
    report_name=None,
    extracted_from=None,
    pinned_pages=None,
    pages=(),
    filler_topics=(
        "Overview", "Background", "Current State Analysis", "Key Issues", "Objectives",
        "Approach", "Solution Design", "Roadmap", "Implementation Plan", "Expected Benefits",
        "Risks", "Next Steps",
    ),
    ai_keywords=(
        "Generative AI", "Machine Learning", "Data Analytics", "Process Automation",
        "Digital Transformation", "Cloud Computing",
    ),
    consulting_insights=(
        "AI 도입 전략", "업무 프로세스 최적화", "단계별 접근법", "리스크 관리",
        "성과 측정", "변화 관리",
    ),
    main_topics=(),
    derive_candidates=True,
    filler_text="Detailed analysis and direction for {topic}",
)

PROFILES: Tuple[DocumentProfile, ...] = (LOTTE_PROFILE, SAMSUNG_PROFILE)

# cap for candidates derived from analysed pages
MAX_DERIVED_CANDIDATES = 14


def resolve_profile(file_name: Optional[str]) -> DocumentProfile:
    """
    Picks the profile for a file name. The first matching profile wins.

    Args:
        file_name (Optional[str]): Uploaded file name.

    Returns:
        DocumentProfile: The matching profile, or the generic one.
    """
    if file_name:
        for profile in PROFILES:
            if profile.matches(file_name):
                return profile
    return GENERIC_PROFILE
