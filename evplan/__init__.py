# EV.AI conversion copilot.
# Structured plan generation, citation handling, chat turns and speech decoding.

__version__ = "0.3.0"
