"""Core data models."""

from .legs import LegContract, OptionLeg, create_option_leg
from .models import OptionDetails, Transaction

__all__ = ["Transaction", "OptionDetails", "LegContract", "OptionLeg", "create_option_leg"]
