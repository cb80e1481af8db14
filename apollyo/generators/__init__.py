from .dictionary_generator import DictionaryGenerator
from .pattern_generator import PatternGenerator

__all__ = ['DictionaryGenerator', 'PatternGenerator']
