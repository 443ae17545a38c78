"""Keyword-based topic tagging for ingested articles."""

import json
import logging
import re
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)

# Minimum score for a topic to be assigned: one early (title/summary)
# mention, or two mentions anywhere in the body.
TAG_THRESHOLD = 2

DEFAULT_TOPIC_KEYWORDS: Dict[str, List[str]] = {
    "US Politics": [
        "congress", "biden", "trump", "election", "senate", "house of representatives",
        "supreme court", "republican", "democrat", "gop", "oval office", "white house",
        "presidential", "governor", "mayor", "congressman", "senator", "impeachment",
        "campaign", "voter", "ballot", "midterm", "primary", "caucus", "swing state",
        "electoral college", "filibuster", "confirmation", "capitol hill", "washington dc",
    ],
    "Global Politics": [
        "international", "foreign policy", "diplomacy", "embassy", "ambassador",
        "nato", "united nations", "eu", "european union", "brexit", "g7", "g20",
        "china relations", "russia", "ukraine", "middle east", "israel", "palestine",
        "sanctions", "trade war", "summit", "treaty", "alliance", "geopolitical",
        "foreign minister", "prime minister", "president", "dictator", "regime",
        "conflict", "peace talks", "ceasefire", "humanitarian", "refugees",
    ],
    "AI News": [
        "artificial intelligence", "ai", "machine learning", "ml", "chatgpt", "gpt",
        "neural network", "deep learning", "algorithm", "automation", "robot",
        "openai", "google ai", "microsoft ai", "anthropic", "claude", "llm",
        "large language model", "generative ai", "computer vision", "nlp",
        "natural language processing", "tensorflow", "pytorch", "ai model",
        "ai training", "ai safety", "agi", "artificial general intelligence",
    ],
    "Economic News": [
        "federal reserve", "fed", "inflation", "gdp", "stock market", "recession",
        "economy", "economic", "finance", "financial", "interest rates", "unemployment",
        "jobs report", "consumer price index", "cpi", "dow jones", "nasdaq", "s&p 500",
        "bull market", "bear market", "volatile", "treasury", "bond", "yield",
        "monetary policy", "fiscal policy", "tax", "tariff", "trade deficit",
        "wall street", "earnings", "quarterly results", "profit", "revenue",
    ],
    "Climate & Environment": [
        "climate change", "global warming", "carbon emissions", "greenhouse gas",
        "renewable energy", "solar", "wind power", "electric vehicle", "ev",
        "sustainability", "environmental", "carbon footprint", "net zero",
        "paris agreement", "cop summit", "fossil fuels", "oil", "natural gas",
        "deforestation", "biodiversity", "conservation", "pollution", "recycling",
        "green energy", "carbon capture", "sea level rise", "extreme weather",
    ],
    "Technology": [
        "tech", "technology", "startup", "silicon valley", "software", "hardware",
        "cyber", "cybersecurity", "data breach", "hacking", "privacy", "encryption",
        "blockchain", "cryptocurrency", "bitcoin", "ethereum", "metaverse", "vr",
        "virtual reality", "augmented reality", "ar", "cloud computing", "saas",
        "platform", "app", "mobile", "innovation", "digital transformation",
        "tech company", "unicorn", "ipo", "venture capital", "funding",
    ],
    "Health & Medicine": [
        "healthcare", "health care", "medical", "medicine", "hospital", "doctor",
        "pandemic", "covid", "vaccine", "vaccination", "disease", "virus",
        "treatment", "therapy", "clinical trial", "fda", "drug", "pharmaceutical",
        "biotech", "mental health", "public health", "epidemic", "outbreak",
        "surgeon general", "cdc", "world health organization", "who", "patient",
        "diagnosis", "symptoms", "cure", "prevention", "immunity",
    ],
    "Business": [
        "corporate", "corporation", "ceo", "chief executive", "merger", "acquisition",
        "ipo", "initial public offering", "earnings", "quarterly", "revenue", "profit",
        "company", "business", "enterprise", "startup", "small business",
        "fortune 500", "market cap", "share price", "dividend", "investor",
        "board of directors", "shareholders", "layoffs", "hiring", "employment",
        "supply chain", "manufacturing", "retail", "e-commerce", "consumer",
    ],
}


def load_topic_keywords(path: str) -> Dict[str, List[str]]:
    """Load a ``{topic: [keyword, ...]}`` mapping from a JSON file."""
    with open(Path(path), "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Topic keyword file {path} must contain a JSON object")

    topics: Dict[str, List[str]] = {}
    for topic, keywords in data.items():
        if not isinstance(keywords, list) or not all(
            isinstance(k, str) for k in keywords
        ):
            raise ValueError(f"Keywords for topic '{topic}' must be a list of strings")
        topics[str(topic)] = list(keywords)
    return topics


class TopicTagger:
    """Scores article text against per-topic keyword lists."""

    def __init__(
        self,
        topic_keywords: Optional[Mapping[str, Sequence[str]]] = None,
        threshold: int = TAG_THRESHOLD,
    ):
        source = DEFAULT_TOPIC_KEYWORDS if topic_keywords is None else topic_keywords
        self.threshold = threshold
        self._keywords: Dict[str, List[str]] = {
            topic: list(keywords) for topic, keywords in source.items()
        }
        self._patterns = {
            topic: [
                re.compile(rf"\b{re.escape(keyword.lower())}\b")
                for keyword in keywords
                if keyword.strip()
            ]
            for topic, keywords in self._keywords.items()
        }

    @classmethod
    def from_settings(cls, settings) -> "TopicTagger":
        if settings.TOPIC_KEYWORDS_FILE:
            logger.info(f"Loading topic keywords from {settings.TOPIC_KEYWORDS_FILE}")
            return cls(load_topic_keywords(settings.TOPIC_KEYWORDS_FILE))
        return cls()

    def score(self, topic: str, haystack: str, early_boundary: int) -> int:
        """Score one topic against an already lowercased haystack."""
        total = 0
        for pattern in self._patterns.get(topic, []):
            positions = [m.start() for m in pattern.finditer(haystack)]
            if not positions:
                continue
            weight = 2 if positions[0] < early_boundary else 1
            total += len(positions) * weight
        return total

    def tag(self, title: str, content: str, summary: str = "") -> List[str]:
        """Return the topics whose score reaches the threshold, in declared order."""
        title = title or ""
        summary = summary or ""
        # Title is counted twice to bias towards headline relevance
        haystack = f"{title} {title} {summary} {content or ''}".lower()
        early_boundary = len(title) + len(summary)

        tags = []
        for topic in self._patterns:
            score = self.score(topic, haystack, early_boundary)
            if score >= self.threshold:
                tags.append(topic)
                logger.debug(f"Tagged with '{topic}' (score: {score})")
        return tags

    def all_topics(self) -> List[str]:
        return list(self._keywords)

    def topic_keywords(self, topic: str) -> List[str]:
        return list(self._keywords.get(topic, []))
