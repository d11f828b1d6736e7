"""
Bots module - Automatic choice answering.

Provides:
- ChoicePolicy: Interface for answering pending choices
- FirstLegalPolicy, RandomPolicy, ScriptedPolicy
- play_out: drive an activation to completion
- play_action: drive a turn action to completion
"""

from .policy import ChoicePolicy, FirstLegalPolicy, RandomPolicy, ScriptedPolicy, play_action, play_out

__all__ = [
    "ChoicePolicy",
    "FirstLegalPolicy",
    "RandomPolicy",
    "ScriptedPolicy",
    "play_action",
    "play_out",
]
