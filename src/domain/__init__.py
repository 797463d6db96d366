"""
Domain layer for form submission notifications.

This layer contains:
- Data models (forms, submissions, outbound messages)
- The notification itself (sender and reply-to policies)
- The processing pipeline (parse, build, render, enqueue)
"""
