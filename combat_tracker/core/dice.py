"""
Dice module for the combat tracker.

Parses damage dice specifications such as "2d6+3" and rolls them against a
replaceable random source, so that combat resolution can be made
deterministic in tests by injecting a seeded or scripted generator.
"""

import random
import re
from typing import Optional

from pydantic import BaseModel, Field

from combat_tracker.core.constants import D20

# Guard against absurd expressions typed at the prompt.
MAX_DICE = 100

DICE_PATTERN = re.compile(r"^\s*(\d*)\s*d\s*(\d+)\s*(?:([+-])\s*(\d+))?\s*$", re.IGNORECASE)


class DiceExpression(BaseModel):
    """A parsed dice specification: COUNTdSIDES followed by an optional modifier."""

    count: int = Field(description="Number of dice to roll", ge=1, le=MAX_DICE)
    sides: int = Field(description="Number of sides of each die", ge=1)
    modifier: int = Field(default=0, description="Flat modifier added once")

    @classmethod
    def parse(cls, expression: str) -> "DiceExpression":
        """
        Parses a dice specification.

        Args:
            expression (str): A specification like "1d8+3", "d6" or "2d4-1".

        Returns:
            DiceExpression: The parsed expression.

        Raises:
            ValueError: If the expression is not a valid dice specification.

        """
        if not expression or not isinstance(expression, str):
            raise ValueError("Invalid dice expression: empty")
        match = DICE_PATTERN.match(expression)
        if not match:
            raise ValueError(f"Invalid dice expression: {expression!r}")
        count_str, sides_str, sign, mod_str = match.groups()
        modifier = int(mod_str) if mod_str else 0
        if sign == "-":
            modifier = -modifier
        return cls(
            count=int(count_str) if count_str else 1,
            sides=int(sides_str),
            modifier=modifier,
        )

    def doubled(self) -> "DiceExpression":
        """Returns the critical version of this expression: twice the dice, same modifier."""
        return self.model_copy(update={"count": self.count * 2})

    def __str__(self) -> str:
        if self.modifier > 0:
            return f"{self.count}d{self.sides}+{self.modifier}"
        if self.modifier < 0:
            return f"{self.count}d{self.sides}{self.modifier}"
        return f"{self.count}d{self.sides}"


class RollBreakdown(BaseModel):
    """Class to hold roll breakdown information."""

    value: int = Field(description="Total roll result")
    description: str = Field(description="Description of the roll")
    rolls: list[int] = Field(
        default_factory=list,
        description="List of individual dice rolls",
    )

    def is_critical(self) -> bool:
        """Determines if the roll is a natural 20."""
        return self.rolls[0] == D20 if self.rolls else False

    def is_fumble(self) -> bool:
        """Determines if the roll is a natural 1."""
        return self.rolls[0] == 1 if self.rolls else False


class DiceRoller:
    """Rolls dice using an injected random source.

    Production code uses a fresh `random.Random`; tests pass a seeded
    generator or any object exposing a compatible `randint(a, b)`.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng if rng is not None else random.Random()

    def roll_die(self, sides: int) -> int:
        """Rolls a single die, uniformly in [1, sides]."""
        return self.rng.randint(1, sides)

    def roll_d20(self) -> int:
        """Rolls the natural d20 used by attacks and initiative."""
        return self.roll_die(D20)

    def roll(self, expression: DiceExpression | str) -> RollBreakdown:
        """
        Rolls a dice expression and describes the result.

        Args:
            expression (DiceExpression | str): The expression to roll.

        Returns:
            RollBreakdown: The total (never below 0), a description such as
            "2d6+3 → [4, 2] + 3" and the individual rolls.

        """
        if isinstance(expression, str):
            expression = DiceExpression.parse(expression)
        rolls = [self.roll_die(expression.sides) for _ in range(expression.count)]
        total = max(0, sum(rolls) + expression.modifier)
        description = f"{expression} → {rolls}"
        if expression.modifier:
            sign = "+" if expression.modifier > 0 else "-"
            description += f" {sign} {abs(expression.modifier)}"
        return RollBreakdown(value=total, description=description, rolls=rolls)
