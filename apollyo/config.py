"""YAML configuration."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml

from .sources.fetcher import DEFAULT_SOURCES, CrawlSource

DEFAULT_CONFIG_PATH = "config/config.yaml"


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> dict:
    """Load configuration from YAML file."""
    config_file = Path(config_path)
    if config_file.exists():
        with open(config_file) as f:
            return yaml.safe_load(f) or {}
    return {}


@dataclass
class SessionSettings:
    backend: str = 'json'  # json | sqlite | memory
    path: str = "data/session/session.json"
    ttl_hours: float = 24


@dataclass
class SearchSettings:
    request_timeout: float = 120.0
    default_max_results: int = 1000
    default_depth: int = 3


@dataclass
class DictionarySettings:
    wordlist_path: str = "data/wordlists/english_words.txt"
    download: bool = False


@dataclass
class FetchSettings:
    timeout: float = 15.0


@dataclass
class AnalysisSettings:
    api_url: str = "https://api.openai.com/v1/chat/completions"
    model: str = "gpt-4o-mini"
    timeout: float = 30.0


@dataclass
class RateLimitSettings:
    limit: int = 10
    window: float = 60.0
    sweep_interval: float = 300.0


@dataclass
class Settings:
    session: SessionSettings = field(default_factory=SessionSettings)
    search: SearchSettings = field(default_factory=SearchSettings)
    dictionary: DictionarySettings = field(default_factory=DictionarySettings)
    sources: List[CrawlSource] = field(default_factory=lambda: list(DEFAULT_SOURCES))
    fetch: FetchSettings = field(default_factory=FetchSettings)
    analysis: AnalysisSettings = field(default_factory=AnalysisSettings)
    rate_limit: RateLimitSettings = field(default_factory=RateLimitSettings)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Settings':
        data = data or {}
        sources = data.get('sources')
        return cls(
            session=SessionSettings(**(data.get('session') or {})),
            search=SearchSettings(**(data.get('search') or {})),
            dictionary=DictionarySettings(**(data.get('dictionary') or {})),
            sources=[CrawlSource.from_dict(s) for s in sources] if sources else list(DEFAULT_SOURCES),
            fetch=FetchSettings(**(data.get('fetch') or {})),
            analysis=AnalysisSettings(**(data.get('analysis') or {})),
            rate_limit=RateLimitSettings(**(data.get('rate_limit') or {})),
        )

    @classmethod
    def load(cls, config_path: str = DEFAULT_CONFIG_PATH) -> 'Settings':
        return cls.from_dict(load_config(config_path))
