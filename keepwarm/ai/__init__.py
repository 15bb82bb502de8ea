"""AI package - Claude-backed message drafting.

Modules:
    - claude_client: Shared lazy Anthropic client
    - drafts: Generative tier of the message suggestion engine
"""
