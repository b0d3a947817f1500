"""Constants and defaults.

Note: Keep storage keys and defaults here to avoid magic strings spread across code.
"""

USERS_KEY = "aams_users"
CURRENT_USER_KEY = "aams_current_user"
SESSION_TIMESTAMP_KEY = "aams_session_timestamp"
SESSION_ACTIVE_KEY = "aams_session_active"
ATTENDANCE_KEY = "aams_attendance"
SUBJECTS_KEY = "aams_subjects"
ANNOUNCEMENTS_KEY = "aams_announcements"
TIMETABLE_KEY = "aams_timetable"
LIVE_ATTENDANCE_CODE_KEY = "aams_live_attendance_code"
DEPARTMENTS_KEY = "aams_departments"
SECTIONS_KEY = "aams_sections"
MASTER_SUBJECTS_KEY = "aams_master_subjects"
COURSE_REGISTRATIONS_KEY = "aams_course_registrations"
REGISTERED_COURSES_KEY = "aams_registered_courses"

DEFAULT_CHANNEL_PREFIX = "aams"
DEFAULT_DEBOUNCE_MS = 500
DEFAULT_LIVE_CODE_TTL_MINUTES = 60
DEFAULT_NOTIFICATION_DISMISS_SECONDS = 3
DEFAULT_STORAGE_QUOTA_BYTES = 5 * 1024 * 1024
DEFAULT_STORAGE_WATCH_INTERVAL_MS = 1000
MIN_PASSWORD_LENGTH = 6
LIVE_CODE_DIGITS = 6
LOW_ATTENDANCE_THRESHOLD = 75.0
