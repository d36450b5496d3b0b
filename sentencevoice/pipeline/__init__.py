"""SentenceVoice pipeline package.

This package contains the sentence pipeline orchestrator and the ordered task
group used for concurrent translation.
"""

from .orchestrator import SentencePipeline
from .task_group import OrderedTaskGroup

__all__ = ["OrderedTaskGroup", "SentencePipeline"]
