"""
Celery Beat Schedule Configuration

Defines periodic tasks that run on a schedule.
"""

from celery.schedules import crontab

# Schedule configuration
beat_schedule = {
    # Idempotency log retention - daily at 3:30 AM UTC
    'prune-handler-logs': {
        'task': 'tasks.prune_handler_logs',
        'schedule': crontab(hour=3, minute=30),
    },
}
