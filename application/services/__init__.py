from .currency_service import CurrencyService
from .usage_monitor import UsageMonitor, UsageStats

__all__ = ['CurrencyService', 'UsageMonitor', 'UsageStats']
