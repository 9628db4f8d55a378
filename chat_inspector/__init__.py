"""
Mentor Chat Inspector - read-only dashboard API for mentor/student/guardian chats.
"""

__version__ = "1.0.0"
