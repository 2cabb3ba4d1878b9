"""
Approval Registry Module.

Moderation state for reviews, keyed by review id.
"""
