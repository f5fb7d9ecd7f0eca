"""Blackjack scoring, dealer policy, round resolution and hints."""
