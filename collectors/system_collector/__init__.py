from .system_collector import SystemCollector

__all__ = ['SystemCollector']
