"""Scheduler module for periodic bump promotion work.

Schedule overview:
  - Every hour, on the hour (``bump_cron``) - Advance due bump schedules
"""
