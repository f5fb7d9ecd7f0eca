"""
Event system for the chipjack table.

This package provides the process-wide event bus that the table engine
publishes to.
"""

from chipjack.events.emitter import EngineEventType, EventBus, EventEmitter

__all__ = ["EngineEventType", "EventBus", "EventEmitter"]
