"""Integrations package - Outbound messaging links.

Modules:
    - whatsapp: wa.me deep links with a prefilled message
"""
