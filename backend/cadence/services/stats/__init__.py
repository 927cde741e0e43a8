from cadence.services.stats.aggregator import round2, summarize

__all__ = ["round2", "summarize"]
