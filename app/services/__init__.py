# app/services/__init__.py

# Exports the service-layer entry points used by the scripts and tests.
from .market import MarketService
from .realtime import subscribe, unsubscribe, clear_subscribers, publish_event, publish_events
