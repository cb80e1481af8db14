"""Filter complexity analysis and processing plans."""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from ..errors import UpstreamAnalysisError
from ..filters.filter_manager import validate_filters
from ..models import AdvancedFilters, Filters, SearchConfig

logger = logging.getLogger(__name__)


@dataclass
class CrawlStrategy:
    depth: int
    sources: List[str]
    priority: str  # speed | balanced | quality

    def to_dict(self) -> Dict[str, Any]:
        return {'depth': self.depth, 'sources': list(self.sources), 'priority': self.priority}


@dataclass
class GenerationStrategy:
    patterns: List[str]
    count: int
    quality: str = 'standard'

    def to_dict(self) -> Dict[str, Any]:
        return {'patterns': list(self.patterns), 'count': self.count, 'quality': self.quality}


@dataclass
class FilterAnalysis:
    complexity: str  # simple | moderate | complex
    estimated_results: int
    processing_time: str  # fast | medium | slow
    recommendations: List[str] = field(default_factory=list)
    optimizations: List[str] = field(default_factory=list)
    crawl_strategy: Optional[CrawlStrategy] = None
    generation_strategy: Optional[GenerationStrategy] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            'complexity': self.complexity,
            'estimatedResults': self.estimated_results,
            'processingTime': self.processing_time,
            'recommendations': list(self.recommendations),
            'optimizations': list(self.optimizations),
        }
        if self.crawl_strategy:
            result['crawlStrategy'] = self.crawl_strategy.to_dict()
        if self.generation_strategy:
            result['generationStrategy'] = self.generation_strategy.to_dict()
        return result


@dataclass
class ProcessingStep:
    id: str
    name: str
    description: str
    type: str  # validation | generation | crawling | filtering | scoring
    priority: int
    dependencies: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'type': self.type,
            'priority': self.priority,
            'dependencies': list(self.dependencies),
        }


@dataclass
class ProcessingPlan:
    mode: str
    filters: Filters
    analysis: FilterAnalysis
    steps: List[ProcessingStep]
    estimated_duration: int  # ms

    def to_dict(self) -> Dict[str, Any]:
        return {
            'mode': self.mode,
            'filters': self.filters.to_dict(),
            'analysis': self.analysis.to_dict(),
            'steps': [s.to_dict() for s in self.steps],
            'estimatedDuration': self.estimated_duration,
        }


# ------------------------------- Local analysis -------------------------------

def crawl_depth(complexity_score: int) -> int:
    if complexity_score <= 3:
        return 1
    if complexity_score <= 7:
        return 2
    return 3


def crawl_source_classes(filters: AdvancedFilters) -> List[str]:
    sources = ['dictionary', 'thesaurus', 'word-lists']
    if filters.rarity and filters.rarity.min > 0.5:
        sources.extend(['rare-words', 'technical-terms'])
    if filters.market_potential is not None and filters.market_potential > 0.6:
        sources.extend(['brand-names', 'domain-names'])
    return sources


def crawl_priority(filters: AdvancedFilters) -> str:
    rarity_min = filters.rarity.min if filters.rarity else None
    market_min = filters.market_potential

    def above(threshold: float) -> bool:
        return any(v is not None and v > threshold for v in (rarity_min, market_min))

    if above(0.7):
        return 'quality'
    if above(0.4):
        return 'balanced'
    return 'speed'


def generation_templates(filters: Filters) -> List[str]:
    patterns = ['CVC', 'CVCV', 'CVCC', 'CCVC']
    if filters.length.max >= 8:
        patterns.extend(['CVCVCV', 'CVCCVC'])
    if filters.length.min <= 4:
        patterns.extend(['CV', 'VC'])
    return patterns


def generation_count(filters: Filters) -> int:
    count = 1000.0
    if filters.pattern.starts_with:
        count *= 0.5
    if filters.pattern.ends_with:
        count *= 0.5
    if filters.pattern.contains:
        count *= 0.3
    return max(500, int(count))


def estimate_result_count(filters: Filters, mode: str, complexity: str) -> int:
    estimate = 1000.0 if mode == 'speed' else 3000.0

    if complexity == 'moderate':
        estimate *= 0.6
    elif complexity == 'complex':
        estimate *= 0.3

    if filters.pattern.starts_with:
        estimate *= 0.4
    if filters.pattern.ends_with:
        estimate *= 0.4
    if filters.pattern.contains:
        estimate *= 0.2

    return max(50, int(estimate))


def analyze_complexity(filters: Filters, mode: str) -> FilterAnalysis:
    """Score how demanding the filters are and derive the mode strategy."""
    score = 0
    recommendations: List[str] = []
    optimizations: List[str] = []

    span = filters.length.max - filters.length.min
    if span > 10:
        score += 2
        recommendations.append("Consider narrowing the length range for better results")
    elif span > 5:
        score += 1

    if filters.pattern.starts_with:
        score += 1
    if filters.pattern.ends_with:
        score += 1
    if filters.pattern.contains:
        score += 2

    crawl_strategy = None
    generation_strategy = None

    if mode == 'hyper' and isinstance(filters, AdvancedFilters):
        if filters.rarity:
            score += 2
            if filters.rarity.min > 0.7:
                recommendations.append("High rarity threshold may limit results significantly")
        if filters.market_potential is not None:
            score += 2
            if filters.market_potential > 0.7:
                recommendations.append("High market potential threshold requires deep analysis")
        if filters.pronunciation:
            score += 1
        if filters.memorability is not None:
            score += 1
        if filters.linguistic:
            score += 2
            if not filters.linguistic.require_vowels:
                optimizations.append("Allowing consonant-only words may produce unusual results")

        crawl_strategy = CrawlStrategy(
            depth=crawl_depth(score),
            sources=crawl_source_classes(filters),
            priority=crawl_priority(filters),
        )
    else:
        generation_strategy = GenerationStrategy(
            patterns=generation_templates(filters),
            count=generation_count(filters),
        )

    if score <= 3:
        complexity = 'simple'
    elif score <= 7:
        complexity = 'moderate'
    else:
        complexity = 'complex'

    return FilterAnalysis(
        complexity=complexity,
        estimated_results=estimate_result_count(filters, mode, complexity),
        processing_time={'simple': 'fast', 'moderate': 'medium'}.get(complexity, 'slow'),
        recommendations=recommendations,
        optimizations=optimizations,
        crawl_strategy=crawl_strategy,
        generation_strategy=generation_strategy,
    )


def processing_steps(mode: str, analysis: FilterAnalysis) -> List[ProcessingStep]:
    """Ordered, informational step list for a search."""
    steps = [
        ProcessingStep('validate-filters', "Validate Filters",
                       "Verify all filter parameters are valid", 'validation', 1),
    ]

    if mode == 'speed':
        template_count = len(analysis.generation_strategy.patterns) if analysis.generation_strategy else 0
        steps.extend([
            ProcessingStep('initialize-generator', "Initialize Word Generator",
                           "Prepare internal word generation engine", 'generation', 2, ['validate-filters']),
            ProcessingStep('generate-words', "Generate Words",
                           f"Generate words using {template_count} patterns", 'generation', 3,
                           ['initialize-generator']),
            ProcessingStep('apply-flexible-filters', "Apply Flexible Filters",
                           "Filter generated words by length and pattern", 'filtering', 4, ['generate-words']),
        ])
        last = 'apply-flexible-filters'
        priority = 5
    else:
        depth = analysis.crawl_strategy.depth if analysis.crawl_strategy else 1
        source_count = len(analysis.crawl_strategy.sources) if analysis.crawl_strategy else 0
        steps.extend([
            ProcessingStep('prepare-crawler', "Prepare Web Crawler",
                           f"Initialize crawler with depth {depth}", 'crawling', 2, ['validate-filters']),
            ProcessingStep('crawl-sources', "Crawl Web Sources",
                           f"Scrape {source_count} sources", 'crawling', 3, ['prepare-crawler']),
            ProcessingStep('apply-advanced-filters', "Apply Advanced Filters",
                           "Filter results by rarity, market potential, and linguistic rules", 'filtering', 4,
                           ['crawl-sources']),
            ProcessingStep('deep-analysis', "Deep Analysis",
                           "Analyze pronunciation, memorability, and market potential", 'scoring', 5,
                           ['apply-advanced-filters']),
        ])
        last = 'deep-analysis'
        priority = 6

    steps.extend([
        ProcessingStep('validate-words', "Validate Words",
                       "Verify English validity of every candidate", 'validation', priority, [last]),
        ProcessingStep('score-and-rank', "Score and Rank",
                       "Calculate final scores and rank results", 'scoring', priority + 1, ['validate-words']),
    ])
    return steps


def estimate_duration(analysis: FilterAnalysis, mode: str, max_results: int) -> int:
    """Rough wall-clock estimate in milliseconds."""
    duration = 2000.0 if mode == 'speed' else 5000.0

    if analysis.complexity == 'moderate':
        duration *= 1.5
    elif analysis.complexity == 'complex':
        duration *= 2.5

    if max_results > 1000:
        duration *= 1.3
    if max_results > 3000:
        duration *= 1.6

    return int(duration)


# ------------------------------- AI analysis -------------------------------

class AIAnalysisClient:
    """Asks an OpenAI-compatible chat-completions endpoint for filter advice."""

    SYSTEM_PROMPT = (
        "You are an expert in English word analysis and discovery. Analyze the given "
        "filters and provide strategic recommendations for word discovery."
    )

    def __init__(
        self,
        api_key: str,
        api_url: str = "https://api.openai.com/v1/chat/completions",
        model: str = "gpt-4o-mini",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.model = model
        self.timeout = timeout
        self._transport = transport

    def _prompt(self, config: SearchConfig) -> str:
        return (
            "Analyze these word discovery filters and provide recommendations:\n"
            f"Mode: {config.mode}\n"
            f"Filters: {json.dumps(config.filters.to_dict(), indent=2)}\n"
            f"Max Results: {config.max_results}\n\n"
            "Provide:\n"
            "1. Complexity assessment (simple/moderate/complex)\n"
            "2. Estimated result count\n"
            "3. Processing time estimate (fast/medium/slow)\n"
            "4. Strategic recommendations\n"
            "5. Optimization suggestions"
        )

    async def insight(self, config: SearchConfig) -> str:
        """Return the model's reply text. Raises UpstreamAnalysisError on any failure."""
        payload = {
            'model': self.model,
            'messages': [
                {'role': 'system', 'content': self.SYSTEM_PROMPT},
                {'role': 'user', 'content': self._prompt(config)},
            ],
            'temperature': 0.7,
            'max_tokens': 500,
        }
        headers = {'Authorization': f"Bearer {self.api_key}"}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.api_url, json=payload, headers=headers)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise UpstreamAnalysisError(f"AI analysis API error: {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise UpstreamAnalysisError(f"AI analysis request failed: {e}") from e
        except ValueError as e:
            raise UpstreamAnalysisError("AI analysis returned invalid JSON") from e

        try:
            content = data['choices'][0]['message']['content']
        except (KeyError, IndexError, TypeError) as e:
            raise UpstreamAnalysisError("AI analysis returned an unexpected payload") from e

        if not isinstance(content, str) or not content.strip():
            raise UpstreamAnalysisError("AI analysis returned an empty reply")
        return content


async def analyze_and_prepare(config: SearchConfig, ai_client: Optional[AIAnalysisClient] = None) -> ProcessingPlan:
    """Validate the filters and build the processing plan.

    With an AI client the reply is prepended to the recommendations; if the
    call fails the local analysis is returned unchanged.
    """
    validate_filters(config.filters)

    analysis = analyze_complexity(config.filters, config.mode)

    if ai_client is not None:
        try:
            reply = await ai_client.insight(config)
        except UpstreamAnalysisError as e:
            logger.warning("AI analysis failed, using local analysis: %s", e)
        else:
            analysis.recommendations.insert(0, f"AI Insight: {reply[:200]}...")

    steps = processing_steps(config.mode, analysis)
    plan = ProcessingPlan(
        mode=config.mode,
        filters=config.filters,
        analysis=analysis,
        steps=steps,
        estimated_duration=estimate_duration(analysis, config.mode, config.max_results),
    )

    logger.info(
        "Filter analysis: %s complexity, ~%d results, %d steps, ~%dms",
        analysis.complexity, analysis.estimated_results, len(steps), plan.estimated_duration,
    )
    for step in steps:
        logger.debug("Step %d %s: %s", step.priority, step.id, step.description)
    return plan
