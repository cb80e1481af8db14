from .filter_manager import build_search_config, filters_for_mode, optimize_filters, validate_filters
from .learning import LearningSnapshot, LearningState

__all__ = [
    'build_search_config', 'filters_for_mode', 'optimize_filters', 'validate_filters',
    'LearningSnapshot', 'LearningState',
]
