"""
Combat tracker for tabletop encounters.

Keeps an ordered roster of combatants, advances turns and rounds, resolves
attacks against armor class, tracks timed status effects, and lets the user
look up a reference entry mid-combat without disturbing the encounter.
"""

__version__ = "0.1.0"
