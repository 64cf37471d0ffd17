"""
Page analysis: an LLM path that asks for a fixed JSON schema and a deterministic
text heuristic that is used whenever the model is unavailable or misbehaves.
"""
from __future__ import annotations

import json
import logging
import re
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache
from typing import Any, List, Optional, Sequence, Tuple

import tiktoken
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from docgraph.models import AnalysisResult, HeuristicAnalysis, LLMAnalysis, PageRecord
from docgraph.prompts import PROMPTS
from docgraph.settings import Settings, settings

LOGGER = logging.getLogger(__name__)

INTENTS = ("inform", "persuade", "decide")
PAGE_TYPES = ("cover", "toc", "summary", "content")
FALLBACK_CONFIDENCE_CAP = 0.95


# ─────────────────────────────────────────────────────────────
# Vocabularies for the heuristic path: (label, lower-case aliases)
# ─────────────────────────────────────────────────────────────

AI_VOCABULARY: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Generative AI", ("generative ai", "생성형 ai", "생성형ai", "gen ai", "genai")),
    ("Machine Learning", ("machine learning", "머신러닝", "ml")),
    ("Deep Learning", ("deep learning", "딥러닝")),
    ("LLM", ("llm", "large language model")),
    ("Multi Agent", ("multi agent", "multi-agent", "멀티 에이전트")),
    ("AI Orchestrator", ("ai orchestrator", "오케스트레이터")),
    ("Data Analytics", ("data analytics", "데이터 분석", "analytics")),
    ("Digital Transformation", ("digital transformation", "디지털 전환", "디지털전환", "dx", "ai/dt")),
    ("Digital Plant", ("digital plant",)),
    ("Smart Manufacturing", ("smart manufacturing", "스마트 팩토리", "smart factory")),
    ("Intelligent R&D", ("intelligent r&d", "지능형 r&d")),
    ("Process Automation", ("process automation", "자동화", "rpa")),
    ("Cloud Computing", ("cloud", "클라우드")),
    ("Business Intelligence", ("business intelligence", "대시보드", "dashboard")),
    ("Knowledge Management", ("knowledge management", "지식공유", "지식 공유")),
    ("Decision Support System", ("decision support", "의사결정 체계", "의사결정체계")),
    ("Predictive Analytics", ("predictive", "예측 모델", "수요 예측")),
    ("SCM", ("scm", "supply chain", "공급망")),
    ("NSCM", ("nscm",)),
    ("AI", ("ai", "인공지능")),
)

CONSULTING_VOCABULARY: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("로드맵 수립", ("로드맵", "roadmap")),
    ("AI 도입 전략", ("ai 전략", "ai strategy", "도입 전략")),
    ("업무 프로세스 최적화", ("프로세스 최적화", "process optimization", "업무 개선", "업무 효율")),
    ("PoC 구축", ("poc", "mvp", "파일럿", "pilot")),
    ("단계별 접근법", ("단계별", "phase")),
    ("리스크 관리", ("리스크", "risk", "위험")),
    ("성과 측정", ("kpi", "성과", "roi")),
    ("변화 관리", ("변화 관리", "change management")),
    ("비용 효율성", ("비용", "cost")),
    ("벤치마킹 기반 분석", ("벤치마킹", "benchmark")),
    ("현장 중심 접근법", ("현장 중심", "현장",)),
    ("수익성 중심 목표 설정", ("수익성", "profitab")),
    ("이행 계획 수립", ("이행 계획", "implementation plan", "실행 계획")),
    ("사용성 제고", ("사용성", "usability")),
)

_TOC_MARKERS = ("contents", "agenda", "목차", "차례")
_SUMMARY_MARKERS = ("executive summary", "summary", "요약", "결론", "conclusion")
_DECIDE_MARKERS = ("결정", "승인", "decision", "approve", "선택", "의사결정 요청")
_PERSUADE_MARKERS = ("제안", "propose", "recommend", "권고", "기대 효과", "benefit", "극대화", "강화")
_KPI_MARKERS = ("%", "kpi", "roi", "지표")
_RISK_MARKERS = ("리스크", "risk", "위험")
_DECISION_LINE_MARKERS = ("결정", "decision", "승인")
_FRAMEWORK_MARKERS = ("프레임워크", "framework", "방법론", "모델", "model")

_STOPWORDS = {
    "the", "and", "for", "with", "from", "this", "that", "page", "are", "was", "of", "to", "in",
    "및", "등", "위한", "통한", "대한", "있는", "하여", "으로",
}
_TOKEN_RE = re.compile(r"[0-9A-Za-z가-힣][0-9A-Za-z가-힣/&+\-]+")


def _contains_term(text_lower: str, term: str) -> bool:
    """Short ASCII terms need word boundaries ('ai' must not match 'maintain')."""
    if term.isascii() and len(term) <= 4:
        return re.search(rf"(?<![0-9a-z]){re.escape(term)}(?![0-9a-z])", text_lower) is not None
    return term in text_lower


def match_vocabulary(text: str, vocabulary: Sequence[Tuple[str, Tuple[str, ...]]]) -> List[str]:
    """
    Returns the vocabulary labels whose label or alias occurs in the text.

    Args:
        text (str): Text to scan.
        vocabulary: (label, aliases) pairs; order of the result follows the vocabulary.

    Returns:
        List[str]: Matched labels, no duplicates.
    """
    low = text.lower()
    hits: List[str] = []
    for label, aliases in vocabulary:
        if _contains_term(low, label.lower()) or any(_contains_term(low, a) for a in aliases):
            hits.append(label)
    return hits


def _first_line_with(lines: Sequence[str], markers: Sequence[str]) -> str:
    for line in lines:
        low = line.lower()
        if any(m in low for m in markers):
            return line[:160]
    return ""


def _top_keywords(text: str, limit: int = 8) -> List[str]:
    counts = Counter(
        tok for tok in _TOKEN_RE.findall(text)
        if len(tok) >= 2 and tok.lower() not in _STOPWORDS and not tok.isdigit()
    )
    return [tok for tok, _ in counts.most_common(limit)]


def heuristic_analysis(text: str, page_number: int, document_title: str = "") -> PageRecord:
    """
    Deterministic page analysis from plain string heuristics. Never raises.

    Args:
        text (str): Page text, may be empty.
        page_number (int): 1-based page number.
        document_title (str, optional): Title of the whole document.

    Returns:
        PageRecord: Record with every field populated.
    """
    text = text or ""
    lines = [ln.strip() for ln in text.splitlines() if ln.strip()]
    low = text.lower()

    # title: a short line near the top
    title = ""
    title_idx = -1
    for idx, line in enumerate(lines[:5]):
        if 2 <= len(line) <= 60:
            title, title_idx = line, idx
            break
    if not title:
        title = f"Page {page_number}"

    subtitle = ""
    for line in lines[title_idx + 1:title_idx + 3]:
        if len(line) <= 80:
            subtitle = line
            break

    body = [ln for i, ln in enumerate(lines) if i != title_idx]
    key_messages = [ln[:200] for ln in body if len(ln) >= 20][:3]
    if not key_messages:
        key_messages = [ln[:200] for ln in body][:3]
    if not key_messages:
        if text.strip():
            key_messages = [title]
        else:
            where = f" of {document_title}" if document_title else ""
            key_messages = [f"Page {page_number}{where} has no extractable text"]

    if any(m in low for m in _TOC_MARKERS):
        page_type = "toc"
    elif any(m in low for m in _SUMMARY_MARKERS):
        page_type = "summary"
    elif page_number == 1 and len(lines) <= 6:
        page_type = "cover"
    else:
        page_type = "content"

    if any(m in low for m in _DECIDE_MARKERS):
        intent = "decide"
    elif any(m in low for m in _PERSUADE_MARKERS):
        intent = "persuade"
    else:
        intent = "inform"

    ai_keywords = match_vocabulary(text, AI_VOCABULARY)
    consulting_insights = match_vocabulary(text, CONSULTING_VOCABULARY)
    collapsed = re.sub(r"\s+", " ", text).strip()

    return PageRecord(
        page_number=page_number,
        title=title,
        subtitle=subtitle,
        intent=intent,
        head_message=key_messages[0],
        key_messages=key_messages,
        keywords=_top_keywords(text),
        ai_keywords=ai_keywords,
        consulting_insights=consulting_insights,
        page_type=page_type,
        summary=collapsed[:200] if collapsed else key_messages[0],
        data_source=[document_title] if document_title else [],
        kpi=_first_line_with(lines, _KPI_MARKERS),
        risks=_first_line_with(lines, _RISK_MARKERS),
        decisions=_first_line_with(lines, _DECISION_LINE_MARKERS),
        framework=_first_line_with(lines, _FRAMEWORK_MARKERS),
        confidence=round(min(FALLBACK_CONFIDENCE_CAP, 0.3 + len(text) / 2000), 3),
    )


# ─────────────────────────────────────────────────────────────
# LLM path
# ─────────────────────────────────────────────────────────────

@lru_cache(maxsize=4)
def _encoder(model: str) -> tiktoken.Encoding:
    try:
        return tiktoken.encoding_for_model(model)
    except KeyError:
        return tiktoken.get_encoding("cl100k_base")


def trim_to_tokens(text: str, max_tokens: int, model: str) -> str:
    """Trim text so that it encodes to at most max_tokens tokens."""
    if not text:
        return text
    enc = _encoder(model)
    tokens = enc.encode(text)
    if len(tokens) <= max_tokens:
        return text
    return enc.decode(tokens[:max_tokens])


class LLMPageSchema(BaseModel):
    """Shape the model is asked to return; lenient about lists vs strings."""
    model_config = ConfigDict(extra="ignore")

    title: str
    subtitle: str = ""
    intent: str = "inform"
    headMessage: str = ""
    keyMessages: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    aiKeywords: List[str] = Field(default_factory=list)
    consultingInsights: List[str] = Field(default_factory=list)
    pageType: str = "content"
    summary: str = ""
    dataSource: List[str] = Field(default_factory=list)
    kpi: str = ""
    risks: str = ""
    decisions: str = ""
    framework: str = ""
    confidence: float = 0.8

    @field_validator("subtitle", "headMessage", "summary", "kpi", "risks", "decisions", "framework",
                     mode="before")
    @classmethod
    def _join_lists(cls, v: Any) -> Any:
        if v is None:
            return ""
        if isinstance(v, list):
            return "; ".join(str(x) for x in v)
        return v

    @field_validator("keyMessages", "keywords", "aiKeywords", "consultingInsights", "dataSource",
                     mode="before")
    @classmethod
    def _wrap_strings(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            return [v] if v.strip() else []
        return v

    @field_validator("intent")
    @classmethod
    def _known_intent(cls, v: str) -> str:
        v = v.strip().lower()
        return v if v in INTENTS else "inform"

    @field_validator("pageType")
    @classmethod
    def _known_page_type(cls, v: str) -> str:
        v = v.strip().lower()
        return v if v in PAGE_TYPES else "content"

    @field_validator("confidence")
    @classmethod
    def _clamp(cls, v: float) -> float:
        return max(0.0, min(1.0, float(v)))


def parse_llm_json(raw: str) -> dict:
    """
    Extract the JSON object from a chat reply.

    Args:
        raw (str): Model output, optionally wrapped in ```json fences or prose.

    Returns:
        dict: The decoded object.

    Raises:
        ValueError: If no JSON object can be decoded.
    """
    cleaned = (raw or "").strip()
    if cleaned.startswith("```"):
        cleaned = re.sub(r"^```(?:json)?", "", cleaned).strip()
        if cleaned.endswith("```"):
            cleaned = cleaned[:-3].strip()
    start, end = cleaned.find("{"), cleaned.rfind("}")
    if start == -1 or end <= start:
        raise ValueError("no JSON object in model output")
    data = json.loads(cleaned[start:end + 1])
    if not isinstance(data, dict):
        raise ValueError("model output is not a JSON object")
    return data


def _record_from_schema(parsed: LLMPageSchema, page_number: int) -> PageRecord:
    key_messages = [m for m in parsed.keyMessages if m.strip()]
    if not key_messages:
        key_messages = [parsed.headMessage or parsed.title]
    return PageRecord(
        page_number=page_number,
        title=parsed.title.strip() or f"Page {page_number}",
        subtitle=parsed.subtitle,
        intent=parsed.intent,
        head_message=parsed.headMessage or key_messages[0],
        key_messages=key_messages,
        keywords=parsed.keywords,
        ai_keywords=parsed.aiKeywords,
        consulting_insights=parsed.consultingInsights,
        page_type=parsed.pageType,
        summary=parsed.summary or key_messages[0],
        data_source=parsed.dataSource,
        kpi=parsed.kpi,
        risks=parsed.risks,
        decisions=parsed.decisions,
        framework=parsed.framework,
        confidence=parsed.confidence,
    )


# ─────────────────────────────────────────────────────────────
# Analyzer
# ─────────────────────────────────────────────────────────────

class PageAnalyzer:
    """
    Runs the LLM path when it is configured and falls back to the heuristic otherwise.

    Args:
        chat: Object with a `generate(prompt, system=...)` method. When omitted the
            shared `Chat` client is created lazily, and only if a usable key exists.
        cfg (Optional[Settings]): Settings bundle. Defaults to the module level settings.
    """

    def __init__(self, chat: Optional[Any] = None, cfg: Optional[Settings] = None):
        self.cfg = cfg or settings
        self._chat = chat

    def _skip_reason(self) -> Optional[str]:
        if not self.cfg.analyzer.use_llm:
            return "llm disabled"
        if self._chat is None and not self.cfg.provider.llm_available():
            return "missing or placeholder API key"
        return None

    def _get_chat(self) -> Any:
        if self._chat is None:
            from docgraph.llm import Chat
            self._chat = Chat.singleton()
        return self._chat

    @property
    def uses_llm(self) -> bool:
        return self._skip_reason() is None

    def analyze(self, text: str, page_number: int, document_title: str = "",
                document_context: str = "") -> AnalysisResult:
        """
        Analyse one page.

        Args:
            text (str): Page text.
            page_number (int): 1-based page number.
            document_title (str, optional): Title of the whole document.
            document_context (str, optional): Beginning of the whole document text.

        Returns:
            AnalysisResult: LLMAnalysis on success, HeuristicAnalysis otherwise.
        """
        reason = self._skip_reason()
        if reason is not None:
            return HeuristicAnalysis(heuristic_analysis(text, page_number, document_title), reason)

        try:
            page_text = trim_to_tokens(text or "", self.cfg.analyzer.max_page_tokens,
                                       self.cfg.analyzer.tiktoken_model)
            prompt = PROMPTS["page_analysis"].format(
                page_number=page_number,
                document_title=document_title or "(untitled)",
                document_context=(document_context or "")[: self.cfg.analyzer.context_chars],
                page_text=page_text,
                language=PROMPTS["DEFAULT_LANGUAGE"],
            )
            raw = self._get_chat().generate(prompt, system=PROMPTS["page_analysis_system"],
                                          json_mode=True)
            parsed = LLMPageSchema(**parse_llm_json(raw))
        except (ValueError, ValidationError) as e:
            # json.JSONDecodeError is a ValueError
            LOGGER.warning("Page %d: unusable model output, using heuristic (%s)", page_number, e)
            return HeuristicAnalysis(heuristic_analysis(text, page_number, document_title),
                                     f"invalid model output: {e}")
        except Exception as e:
            LOGGER.warning("Page %d: LLM call failed, using heuristic (%s)", page_number, e)
            return HeuristicAnalysis(heuristic_analysis(text, page_number, document_title),
                                     f"llm error: {e}")

        return LLMAnalysis(_record_from_schema(parsed, page_number))

    def analyze_pages(self, pages: Sequence[Tuple[int, str]], document_title: str = "",
                      document_context: str = "", max_workers: int = 4) -> List[AnalysisResult]:
        """
        Analyse many pages; LLM calls run concurrently, results keep page order.

        Args:
            pages: (page_number, text) pairs.
            document_title (str, optional): Title of the whole document.
            document_context (str, optional): Beginning of the whole document text.
            max_workers (int, optional): Thread pool size for LLM calls. Defaults to 4.

        Returns:
            List[AnalysisResult]: One result per page, in input order.
        """
        if not self.uses_llm or len(pages) <= 1:
            return [self.analyze(t, n, document_title, document_context) for n, t in pages]

        with ThreadPoolExecutor(max_workers=max_workers) as ex:
            futs = [ex.submit(self.analyze, t, n, document_title, document_context) for n, t in pages]
            return [f.result() for f in futs]
