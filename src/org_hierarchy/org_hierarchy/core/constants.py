"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_DB_PORT = 3306
EDITOR_ROLES = ("admin", "hr", "manager")
TERMINATED_STATUS = "Terminated"
DIRECT_REPORTS_LIMIT = 500
MAX_EDITOR_SESSIONS = 200
