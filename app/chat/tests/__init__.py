"""
Tests for chat app.

This package contains test modules for:
- test_models.py: Conversation, Message model tests
- test_state_machines.py: Reply-deadline transitions
- test_services.py: MessageService billing tests
- test_views.py: Send endpoint tests

Usage:
    pytest app/chat/tests/
    pytest app/chat/tests/test_services.py
"""
