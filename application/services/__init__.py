from .conversion_service import ConversionResult, ConversionService
from .currency_service import CurrencyService
from .rate_aggregator import RateAggregator
from .rate_service import RateRetrievalService
from .refresh_service import RefreshOrchestrator
from .trend_service import TrendAnalyzer

__all__ = [
	'ConversionResult',
	'ConversionService',
	'CurrencyService',
	'RateAggregator',
	'RateRetrievalService',
	'RefreshOrchestrator',
	'TrendAnalyzer',
]
