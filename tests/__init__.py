# =============================================================================
# HOOKRUNNER - TEST PACKAGE
# =============================================================================
"""
Test Package

Test Structure:
    tests/
    ├── __init__.py                # This file
    ├── conftest.py                # Shared fixtures and payload builders
    ├── test_git_models.py         # Reference, RepositoryPath, GitBackend
    ├── test_config.py             # Configuration loading
    ├── test_executor.py           # GitExecutable and MemoryVersionControl
    ├── test_synchronizer.py       # Clone-or-update decision
    ├── test_middleware.py         # User-Agent and signature checks
    ├── test_webhook_handler.py    # Event routing and HTTP surface
    ├── test_client.py             # Webhook registry
    ├── test_main.py               # CLI parsing and commands
    └── fixtures/
        ├── ping_sample.json
        └── push_sample.json

Running Tests:
    pytest tests/ -v
"""
