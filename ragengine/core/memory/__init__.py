"""
Long-term memory: session summarization and its schedule.
"""

from ragengine.core.memory.scheduler import MemoryScheduler
from ragengine.core.memory.summarizer import MemorySummarizer, SummaryCycleReport

__all__ = ["MemoryScheduler", "MemorySummarizer", "SummaryCycleReport"]
