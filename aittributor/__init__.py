"""
aittributor adds AI agent attribution trailers to git commit messages.
"""

from .agents import KNOWN_AGENTS, Agent
from .detect import DetectionOptions, dedup_agents, detect_agents

__all__ = ["Agent", "KNOWN_AGENTS", "DetectionOptions", "dedup_agents", "detect_agents"]
