"""
Consulting taxonomy: organizations, industries and clients, capabilities,
deliverables and KPIs, with aliases and typed relationships. It is the seed
ontology loaded on reset and the dictionary used by ontology extraction.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Tuple

from docgraph.layout import grid_position
from docgraph.models import Edge, Node, node_color


@dataclass(frozen=True)
class TaxonomyEntity:
    id: str
    label: str
    type: str
    category: str
    aliases: Tuple[str, ...] = ()


@dataclass(frozen=True)
class TaxonomyRelation:
    source: str
    target: str
    type: str
    weight: float


ORGANIZATIONS: Tuple[TaxonomyEntity, ...] = (
    TaxonomyEntity("pwc-global", "PwC Global", "organization", "global"),
    TaxonomyEntity("pwc-korea", "PwC Korea", "organization", "country"),
    TaxonomyEntity("advisory", "Advisory", "division", "business-unit", ("어드바이저리", "자문")),
    TaxonomyEntity("assurance", "Assurance", "division", "business-unit", ("어슈어런스", "보증")),
    TaxonomyEntity("tax", "Tax & Legal", "division", "business-unit", ("세무", "택스")),
    TaxonomyEntity("consulting", "Consulting", "division", "business-unit", ("컨설팅",)),
    TaxonomyEntity("deals", "Deals", "practice", "service-line", ("딜스", "M&A", "인수합병")),
    TaxonomyEntity("risk", "Risk Assurance", "practice", "service-line", ("리스크", "위험관리")),
    TaxonomyEntity("forensics", "Forensics", "practice", "service-line", ("포렌식", "수사")),
    TaxonomyEntity("strategy", "Strategy&", "practice", "service-line", ("전략", "스트래티지")),
    TaxonomyEntity("technology", "Technology Consulting", "practice", "service-line", ("기술컨설팅", "IT컨설팅")),
    TaxonomyEntity("operations", "Operations", "practice", "service-line", ("운영", "오퍼레이션")),
    TaxonomyEntity("people-org", "People & Organisation", "practice", "service-line", ("인사조직", "HR")),
)

INDUSTRIES: Tuple[TaxonomyEntity, ...] = (
    TaxonomyEntity("financial-services", "Financial Services", "industry", "sector",
                   ("금융", "FS", "은행", "보험", "증권")),
    TaxonomyEntity("manufacturing", "Manufacturing", "industry", "sector", ("제조업", "제조", "생산")),
    TaxonomyEntity("retail-consumer", "Retail & Consumer", "industry", "sector", ("소매", "유통", "소비재", "CPG")),
    TaxonomyEntity("healthcare", "Healthcare", "industry", "sector", ("헬스케어", "의료", "제약", "바이오")),
    TaxonomyEntity("energy", "Energy, Utilities & Resources", "industry", "sector",
                   ("에너지", "유틸리티", "자원", "전력", "가스")),
    TaxonomyEntity("tmt", "Technology, Media & Telecommunications", "industry", "sector",
                   ("TMT", "미디어", "통신", "테크")),
    TaxonomyEntity("automotive", "Automotive", "industry", "sector", ("자동차", "모빌리티", "완성차")),
    TaxonomyEntity("aerospace", "Aerospace & Defence", "industry", "sector", ("항공우주", "방산", "국방")),
    TaxonomyEntity("samsung", "Samsung", "client", "enterprise", ("삼성", "삼성그룹")),
    TaxonomyEntity("lg", "LG", "client", "enterprise", ("엘지", "LG그룹")),
    TaxonomyEntity("sk", "SK", "client", "enterprise", ("SK그룹",)),
    TaxonomyEntity("hyundai", "Hyundai Motor", "client", "enterprise", ("현대자동차", "현대차")),
)

CAPABILITIES: Tuple[TaxonomyEntity, ...] = (
    TaxonomyEntity("digital-transformation", "Digital Transformation", "capability", "digital",
                   ("디지털전환", "디지털 전환", "DX", "디지털혁신")),
    TaxonomyEntity("ai-analytics", "AI & Analytics", "capability", "digital",
                   ("AI", "인공지능", "애널리틱스", "데이터분석", "머신러닝")),
    TaxonomyEntity("cloud", "Cloud", "capability", "digital", ("클라우드", "클라우드전환")),
    TaxonomyEntity("cybersecurity", "Cybersecurity", "capability", "digital", ("사이버보안", "정보보호")),
    TaxonomyEntity("corporate-strategy", "Corporate Strategy", "capability", "strategy", ("기업전략", "전사전략")),
    TaxonomyEntity("digital-strategy", "Digital Strategy", "capability", "strategy", ("디지털전략",)),
    TaxonomyEntity("innovation", "Innovation", "capability", "strategy", ("혁신", "이노베이션")),
    TaxonomyEntity("supply-chain", "Supply Chain", "capability", "operations", ("공급망", "SCM", "S&OP")),
    TaxonomyEntity("process-optimization", "Process Optimization", "capability", "operations",
                   ("프로세스최적화", "업무개선", "BPR")),
    TaxonomyEntity("cost-reduction", "Cost Reduction", "capability", "operations", ("비용절감", "원가절감")),
    TaxonomyEntity("sap", "SAP", "technology", "platform", ("ERP",)),
    TaxonomyEntity("salesforce", "Salesforce", "technology", "platform", ("세일즈포스", "CRM")),
    TaxonomyEntity("palantir", "Palantir", "technology", "platform", ("팔란티어", "데이터플랫폼")),
    TaxonomyEntity("alteryx", "Alteryx", "technology", "platform", ("알테릭스", "데이터분석툴")),
)

DELIVERABLES: Tuple[TaxonomyEntity, ...] = (
    TaxonomyEntity("proposal", "Proposal", "deliverable", "document", ("제안서", "프로포절", "RFP")),
    TaxonomyEntity("final-report", "Final Report", "deliverable", "document", ("최종보고서", "결과보고서", "종료보고")),
    TaxonomyEntity("executive-summary", "Executive Summary", "deliverable", "document",
                   ("경영진요약", "임원요약", "ExSum")),
    TaxonomyEntity("business-case", "Business Case", "deliverable", "document", ("사업타당성", "비즈니스케이스")),
    TaxonomyEntity("operating-model", "Operating Model", "deliverable", "framework", ("운영모델", "조직모델")),
    TaxonomyEntity("roadmap", "Roadmap", "deliverable", "framework", ("로드맵", "실행계획")),
    TaxonomyEntity("kpi-dashboard", "KPI Dashboard", "deliverable", "framework", ("성과지표", "대시보드")),
    TaxonomyEntity("data-platform", "Data Platform", "deliverable", "system", ("데이터레이크",)),
    TaxonomyEntity("analytics-model", "Analytics Model", "deliverable", "system", ("분석모델", "예측모델")),
)

KPIS: Tuple[TaxonomyEntity, ...] = (
    TaxonomyEntity("roi", "ROI", "kpi", "financial", ("투자수익률", "Return on Investment")),
    TaxonomyEntity("cost-saving", "Cost Saving", "kpi", "financial", ("원가절감액",)),
    TaxonomyEntity("revenue-growth", "Revenue Growth", "kpi", "financial", ("매출성장률", "수익증가")),
    TaxonomyEntity("efficiency", "Efficiency", "kpi", "operational", ("효율성", "생산성")),
    TaxonomyEntity("time-to-market", "Time to Market", "kpi", "operational", ("출시시간", "TTM")),
    TaxonomyEntity("customer-satisfaction", "Customer Satisfaction", "kpi", "operational",
                   ("고객만족도", "고객 만족도", "CSAT", "NPS")),
    TaxonomyEntity("digital-adoption", "Digital Adoption", "kpi", "digital", ("디지털도입률", "디지털활용률")),
    TaxonomyEntity("automation-rate", "Automation Rate", "kpi", "digital", ("자동화율", "RPA효과")),
)

ENTITIES: Tuple[TaxonomyEntity, ...] = ORGANIZATIONS + INDUSTRIES + CAPABILITIES + DELIVERABLES + KPIS

RELATIONS: Tuple[TaxonomyRelation, ...] = (
    # organization hierarchy
    TaxonomyRelation("pwc-global", "pwc-korea", "contains", 1.0),
    TaxonomyRelation("pwc-korea", "advisory", "contains", 1.0),
    TaxonomyRelation("pwc-korea", "assurance", "contains", 1.0),
    TaxonomyRelation("pwc-korea", "tax", "contains", 1.0),
    TaxonomyRelation("pwc-korea", "consulting", "contains", 1.0),
    TaxonomyRelation("advisory", "deals", "contains", 1.0),
    TaxonomyRelation("advisory", "risk", "contains", 1.0),
    TaxonomyRelation("advisory", "forensics", "contains", 1.0),
    TaxonomyRelation("consulting", "strategy", "contains", 1.0),
    TaxonomyRelation("consulting", "technology", "contains", 1.0),
    TaxonomyRelation("consulting", "operations", "contains", 1.0),
    TaxonomyRelation("consulting", "people-org", "contains", 1.0),
    # practice → capability
    TaxonomyRelation("technology", "digital-transformation", "provides", 0.9),
    TaxonomyRelation("technology", "ai-analytics", "provides", 0.9),
    TaxonomyRelation("technology", "cloud", "provides", 0.8),
    TaxonomyRelation("technology", "cybersecurity", "provides", 0.7),
    TaxonomyRelation("strategy", "corporate-strategy", "provides", 0.9),
    TaxonomyRelation("strategy", "digital-strategy", "provides", 0.8),
    TaxonomyRelation("strategy", "innovation", "provides", 0.7),
    TaxonomyRelation("operations", "supply-chain", "provides", 0.9),
    TaxonomyRelation("operations", "process-optimization", "provides", 0.8),
    TaxonomyRelation("operations", "cost-reduction", "provides", 0.8),
    # capability → technology
    TaxonomyRelation("ai-analytics", "palantir", "uses", 0.8),
    TaxonomyRelation("ai-analytics", "alteryx", "uses", 0.7),
    TaxonomyRelation("digital-transformation", "sap", "uses", 0.7),
    TaxonomyRelation("digital-transformation", "salesforce", "uses", 0.6),
    # industry → client
    TaxonomyRelation("tmt", "samsung", "includes", 0.9),
    TaxonomyRelation("tmt", "lg", "includes", 0.8),
    TaxonomyRelation("automotive", "hyundai", "includes", 0.9),
    TaxonomyRelation("energy", "sk", "includes", 0.8),
    # capability → deliverable
    TaxonomyRelation("corporate-strategy", "business-case", "generates", 0.8),
    TaxonomyRelation("digital-strategy", "roadmap", "generates", 0.8),
    TaxonomyRelation("ai-analytics", "data-platform", "generates", 0.8),
    TaxonomyRelation("ai-analytics", "analytics-model", "generates", 0.9),
    TaxonomyRelation("process-optimization", "operating-model", "generates", 0.7),
    # capability → KPI
    TaxonomyRelation("cost-reduction", "cost-saving", "measures", 0.9),
    TaxonomyRelation("digital-transformation", "digital-adoption", "measures", 0.8),
    TaxonomyRelation("process-optimization", "efficiency", "measures", 0.8),
    TaxonomyRelation("ai-analytics", "automation-rate", "measures", 0.7),
    # client requests
    TaxonomyRelation("samsung", "digital-transformation", "requests", 0.8),
    TaxonomyRelation("samsung", "supply-chain", "requests", 0.7),
    TaxonomyRelation("hyundai", "ai-analytics", "requests", 0.8),
    TaxonomyRelation("lg", "cloud", "requests", 0.7),
)

ENTITY_BY_ID: Dict[str, TaxonomyEntity] = {e.id: e for e in ENTITIES}

# Document classification by file name / content
DOCUMENT_TYPE_PATTERNS: Tuple[Tuple[str, "re.Pattern[str]"], ...] = (
    ("proposal", re.compile(r"제안서|proposal|rfp", re.IGNORECASE)),
    ("report", re.compile(r"보고서|보고|report|결과", re.IGNORECASE)),
    ("strategy", re.compile(r"전략|strategy", re.IGNORECASE)),
    ("analysis", re.compile(r"분석|analysis", re.IGNORECASE)),
)

CLIENT_PATTERNS: Tuple[Tuple[str, "re.Pattern[str]"], ...] = (
    ("samsung", re.compile(r"삼성|samsung", re.IGNORECASE)),
    ("lg", re.compile(r"\blg\b|엘지", re.IGNORECASE)),
    ("sk", re.compile(r"\bsk\b", re.IGNORECASE)),
    ("hyundai", re.compile(r"현대|hyundai", re.IGNORECASE)),
    ("lotte", re.compile(r"롯데|lotte", re.IGNORECASE)),
)

TAG_PATTERNS: Tuple[Tuple[str, "re.Pattern[str]"], ...] = (
    ("digital", re.compile(r"디지털|digital", re.IGNORECASE)),
    ("ai", re.compile(r"\bai\b|인공지능", re.IGNORECASE)),
    ("cloud", re.compile(r"클라우드|cloud", re.IGNORECASE)),
    ("analytics", re.compile(r"분석|analytics", re.IGNORECASE)),
    ("strategy", re.compile(r"전략|strategy", re.IGNORECASE)),
)


def seed_ontology() -> Tuple[List[Node], List[Edge]]:
    """
    The taxonomy as graph data: entities on a grid, relations as weighted links.

    Returns:
        Tuple[List[Node], List[Edge]]: Fresh node and edge objects on every call.
    """
    nodes: List[Node] = []
    for index, entity in enumerate(ENTITIES):
        x, y, z = grid_position(index)
        nodes.append(Node(
            id=entity.id,
            label=entity.label,
            type=entity.type,
            category=entity.category,
            x=x, y=y, z=z,
            color=node_color(entity.type),
            confidence=1.0,
            metadata={"aliases": list(entity.aliases), "source": "seed"},
        ))
    edges = [Edge(source=r.source, target=r.target, type=r.type, strength=r.weight) for r in RELATIONS]
    return nodes, edges
