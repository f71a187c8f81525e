"""
Artisan REST API.

Provides DRF ViewSets for:
- Intervention (full CRUD + status + calendar layout)
- Invoice (read-only + reminders + overdue scan)
- Notification (list/read/delete + intervention reminder scan)
"""
