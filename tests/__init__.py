"""KeepWarm Test Suite.

Test organization mirrors keepwarm/ structure:
    tests/
    ├── conftest.py          # Shared fixtures
    ├── test_core/           # Config, logging, exceptions, phone
    ├── test_db/             # Models and contact store
    ├── test_engine/         # Cadence, transitions, queue, drafts
    ├── test_ai/             # Claude drafting (client mocked)
    ├── test_integrations/   # WhatsApp links
    └── test_app.py          # CLI entry point
"""
