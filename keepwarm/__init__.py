"""KeepWarm Source Package.

Relationship cadence manager: decides who is due for outreach today,
tracks what happened, and drafts the message.

Layers:
    - core: Configuration, logging, exceptions, phone normalization
    - db: Contact models and the SQLite contact store
    - engine: Cadence scheduling, state transitions, due queue, suggestions
    - ai: Claude-backed message drafting
    - integrations: Outbound deep links (WhatsApp)
"""

__version__ = "0.1.0"
