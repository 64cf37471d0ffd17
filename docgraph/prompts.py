"""Prompt templates used by the page analyzer."""

PROMPTS = {}

PROMPTS["DEFAULT_LANGUAGE"] = "Korean"

PROMPTS["page_analysis_system"] = """You are a senior management consultant who reads slide decks and reports.
You summarise a single page at a time and always answer with one JSON object and nothing else."""

PROMPTS["page_analysis"] = """Analyse page {page_number} of the document "{document_title}".

Document context (beginning of the whole document):
---
{document_context}
---

Page text:
---
{page_text}
---

Return ONLY a JSON object with the following structure:
{{
    "title": "short page title",
    "subtitle": "subtitle or empty string",
    "intent": "inform|persuade|decide",
    "headMessage": "the single sentence the page wants the reader to remember",
    "keyMessages": ["2-5 key messages"],
    "keywords": ["plain keywords found on the page"],
    "aiKeywords": ["AI / data / digital technology terms"],
    "consultingInsights": ["consulting or business insights"],
    "pageType": "cover|toc|summary|content",
    "summary": "one or two sentence summary",
    "dataSource": ["sources the page relies on"],
    "kpi": "main KPI or empty string",
    "risks": "main risk or empty string",
    "decisions": "decision requested or empty string",
    "framework": "framework or methodology used, or empty string",
    "confidence": 0.0-1.0
}}

Answer in {language}. Important: Return only the JSON object, no other text or explanation."""
