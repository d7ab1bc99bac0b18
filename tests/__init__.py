"""
Test suite for the image publisher.

Run all tests:
    pytest tests/ -v

Run only the tests that execute a stub build tool:
    pytest tests/ -m stub_tool
"""
