"""
chipjack: a single-player blackjack table with a persistent chip balance.

The core (hand evaluation, dealer policy, round resolution and the round
state machine) is pure and synchronous. Persistence and the interactive
console live on top of it in `chipjack.storage`, `chipjack.engine` and
`chipjack.cli`.
"""

__version__ = "0.1.0"
