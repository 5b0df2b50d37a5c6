"""
Labels for clarity.
"""

from typing import Dict, List, Literal

Operator = Literal["+", "-", "*", "/"]
GameStatus = Literal["in_progress", "won", "lost"]
Turn = Literal["creator", "opponent"]  # whose role may guess next
Mark = Literal["exact", "present", "absent"]
Feedback = List[Mark]  # one mark per character
KeyFeedback = Dict[str, Mark]  # best mark seen per symbol
