"""
BZFlag Query Client Test Suite

This package contains tests for the BZFlag query client implementation.

Directory Structure:
    unit/        - Pure unit tests for individual functions (fast, no I/O)
    async/       - Async tests with mocked StreamReader/StreamWriter
    integration/ - End-to-end queries against a local fake server

Running Tests:
    # Run all tests
    pytest

    # Run specific test directory
    pytest tests/unit
    pytest tests/async
    pytest tests/integration

    # Run with coverage
    pytest --cov=bzf_client --cov-report=html

    # Run with specific markers
    pytest -m unit
    pytest -m async_test
    pytest -m integration

Test Markers:
    @pytest.mark.unit         - Fast unit tests (no I/O)
    @pytest.mark.async_test   - Async tests with mocked I/O
    @pytest.mark.integration  - Integration tests (cross-module)
    @pytest.mark.network      - Tests requiring network mocking
    @pytest.mark.slow         - Slow-running tests

Fixtures:
    Shared fixtures are defined in conftest.py and include:
    - Mock network streams (mock_stream_reader, mock_stream_writer)
    - Record payload builders (game_config_builder, team_update_builder,
      player_builder, player_count_builder)
    - Utility helpers (frame_builder)
"""
