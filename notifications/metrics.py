from prometheus_client import Counter


notifications_created_total = Counter("notifications_created_total", "In-app notifications created", ["type"])
notification_emails_total = Counter("notifications_emails_total", "Notification email copies", ["status"])
