"""Constants for the Project Calendar integration.

This file centralizes configuration keys, defaults, storage keys, persisted
field names, frequency tags, and service identifiers for consistency across
the integration.
"""

import logging

from homeassistant.const import Platform

# ------------------------------------------------------------------------------------------------
# General / Integration Information
# ------------------------------------------------------------------------------------------------
# Integration Name
PROJECT_CALENDAR_TITLE = "Project Calendar"

# Integration Domain
DOMAIN = "project_calendar"

# Logger
LOGGER = logging.getLogger(__package__)

# Supported Platforms
PLATFORMS = [
    Platform.CALENDAR,
]

# Coordinator
COORDINATOR = "coordinator"
COORDINATOR_SUFFIX = "_coordinator"

# Storage and Versioning
STORE = "store"
STORAGE_VERSION = 1
STORAGE_KEY_PROJECTS = f"{DOMAIN}.projects"
STORAGE_KEY_FINISHED_PROJECTS = f"{DOMAIN}.finished_projects"
STORAGE_KEY_TODOS = f"{DOMAIN}.todos"

# ------------------------------------------------------------------------------------------------
# Configuration Keys / Defaults
# ------------------------------------------------------------------------------------------------
CONF_UPDATE_INTERVAL = "update_interval"
CONF_PROJECT_RETENTION_DAYS = "project_retention_days"
CONF_TODO_RETENTION_DAYS = "todo_retention_days"
CONF_HORIZON_MONTHS = "horizon_months"

# Minutes between periodic maintenance runs
DEFAULT_UPDATE_INTERVAL = 60
DEFAULT_PROJECT_RETENTION_DAYS = 3
DEFAULT_TODO_RETENTION_DAYS = 14
DEFAULT_HORIZON_MONTHS = 2

# ------------------------------------------------------------------------------------------------
# Persisted Field Names (JSON layout of the stored collections)
# ------------------------------------------------------------------------------------------------
# Shared schedulable fields
DATA_ID = "id"
DATA_TITLE = "title"
DATA_FREQUENCY = "frequency"
DATA_FREQUENCY_OPTION = "frequencyOption"
DATA_FREQUENCY_OPTIONS_ALIAS = "frequencyOptions"
DATA_RECURRENCE_EXCLUDED_DATES = "recurrenceExcludedDates"
DATA_RECURRENCE_END_DATE = "recurrenceEndDate"
DATA_PARENT_ID = "parentId"
DATA_FINISHED_AT = "finishedAt"
DATA_NOTIFICATION_ENABLED = "notificationEnabled"

# Project fields
DATA_PROJECT_NUMBER = "projectNumber"
DATA_PROJECT_WEB_APP_PERIOD_START = "webAppPeriodStart"
DATA_PROJECT_WEB_APP_PERIOD_END = "webAppPeriodEnd"
DATA_PROJECT_FIELD_WORK_PERIOD_START = "fieldWorkPeriodStart"
DATA_PROJECT_FIELD_WORK_PERIOD_END = "fieldWorkPeriodEnd"
DATA_PROJECT_END_DATE = "endDate"
DATA_PROJECT_REMARKS = "remarks"
DATA_PROJECT_TEAM = "team"
DATA_PROJECT_STATUS = "status"
DATA_PROJECT_IS_WEB_APP_FINISHED = "isWebAppFinished"
DATA_PROJECT_IS_FIELD_WORK_STARTED = "isFieldWorkStarted"

# Todo fields
DATA_TODO_DATE = "date"
DATA_TODO_DEADLINE = "deadline"
DATA_TODO_IMPORTANCE = "importance"
DATA_TODO_CONTENT = "content"
DATA_TODO_CATEGORY = "category"
DATA_TODO_IS_FINISHED = "isFinished"

# Fields that live only on a recurrence template
RECURRENCE_CONTROL_FIELDS = (
    DATA_FREQUENCY,
    DATA_FREQUENCY_OPTION,
    DATA_FREQUENCY_OPTIONS_ALIAS,
    DATA_RECURRENCE_EXCLUDED_DATES,
    DATA_RECURRENCE_END_DATE,
)

# Project status values
PROJECT_STATUS_ACTIVE = "active"
PROJECT_STATUS_FINISHED = "finished"

DEFAULT_TODO_IMPORTANCE = 3

# ------------------------------------------------------------------------------------------------
# Frequencies
# ------------------------------------------------------------------------------------------------
FREQUENCY_NONE = "none"
FREQUENCY_DAILY = "daily"
FREQUENCY_WEEKLY = "weekly"
FREQUENCY_MONTHLY = "monthly"
FREQUENCY_YEARLY = "yearly"

FREQUENCY_OPTIONS = [
    FREQUENCY_NONE,
    FREQUENCY_DAILY,
    FREQUENCY_WEEKLY,
    FREQUENCY_MONTHLY,
    FREQUENCY_YEARLY,
]

# Tags written by the web client
FREQUENCY_ALIASES = {
    "": FREQUENCY_NONE,
    "설정 안함": FREQUENCY_NONE,
    "매일": FREQUENCY_DAILY,
    "매주": FREQUENCY_WEEKLY,
    "매월": FREQUENCY_MONTHLY,
    "매년": FREQUENCY_YEARLY,
}

# Weekday names -> index (0=Sunday .. 6=Saturday)
WEEKDAY_INDEX_BY_NAME = {
    "일": 0,
    "월": 1,
    "화": 2,
    "수": 3,
    "목": 4,
    "금": 5,
    "토": 6,
    "sun": 0,
    "mon": 1,
    "tue": 2,
    "wed": 3,
    "thu": 4,
    "fri": 5,
    "sat": 6,
    "sunday": 0,
    "monday": 1,
    "tuesday": 2,
    "wednesday": 3,
    "thursday": 4,
    "friday": 5,
    "saturday": 6,
}

# Monthly option meaning "last day of the month"
MONTHLY_LAST_DAY_OPTIONS = {"말일", "last", "last_day"}


# ------------------------------------------------------------------------------------------------
# Series deletion
# ------------------------------------------------------------------------------------------------
DELETE_MODE_SINGLE = "single"
DELETE_MODE_FUTURE = "future"
DELETE_MODES = [DELETE_MODE_SINGLE, DELETE_MODE_FUTURE]

# ------------------------------------------------------------------------------------------------
# Services
# ------------------------------------------------------------------------------------------------
SERVICE_RUN_MAINTENANCE = "run_maintenance"
SERVICE_CREATE_PROJECT = "create_project"
SERVICE_UPDATE_PROJECT = "update_project"
SERVICE_FINISH_PROJECT = "finish_project"
SERVICE_DELETE_PROJECT = "delete_project"
SERVICE_CREATE_TODO = "create_todo"
SERVICE_UPDATE_TODO = "update_todo"
SERVICE_DELETE_TODO = "delete_todo"
SERVICE_EXPORT_DATA = "export_data"
SERVICE_IMPORT_DATA = "import_data"

# Service fields
FIELD_PROJECT_ID = "project_id"
FIELD_TODO_ID = "todo_id"
FIELD_MODE = "mode"
FIELD_TITLE = "title"
FIELD_FREQUENCY = "frequency"
FIELD_FREQUENCY_OPTIONS = "frequency_options"
FIELD_RECURRENCE_END_DATE = "recurrence_end_date"
FIELD_NOTIFICATION_ENABLED = "notification_enabled"
FIELD_PROJECT_NUMBER = "project_number"
FIELD_WEB_APP_PERIOD_START = "web_app_period_start"
FIELD_WEB_APP_PERIOD_END = "web_app_period_end"
FIELD_FIELD_WORK_PERIOD_START = "field_work_period_start"
FIELD_FIELD_WORK_PERIOD_END = "field_work_period_end"
FIELD_END_DATE = "end_date"
FIELD_REMARKS = "remarks"
FIELD_TEAM = "team"
FIELD_STATUS = "status"
FIELD_IS_WEB_APP_FINISHED = "is_web_app_finished"
FIELD_IS_FIELD_WORK_STARTED = "is_field_work_started"
FIELD_DATE = "date"
FIELD_DEADLINE = "deadline"
FIELD_IMPORTANCE = "importance"
FIELD_CONTENT = "content"
FIELD_CATEGORY = "category"
FIELD_IS_FINISHED = "is_finished"
FIELD_PROJECTS = "projects"
FIELD_TODOS = "todos"

# Service field -> persisted field
PROJECT_FIELD_MAP = {
    FIELD_TITLE: DATA_TITLE,
    FIELD_PROJECT_NUMBER: DATA_PROJECT_NUMBER,
    FIELD_WEB_APP_PERIOD_START: DATA_PROJECT_WEB_APP_PERIOD_START,
    FIELD_WEB_APP_PERIOD_END: DATA_PROJECT_WEB_APP_PERIOD_END,
    FIELD_FIELD_WORK_PERIOD_START: DATA_PROJECT_FIELD_WORK_PERIOD_START,
    FIELD_FIELD_WORK_PERIOD_END: DATA_PROJECT_FIELD_WORK_PERIOD_END,
    FIELD_END_DATE: DATA_PROJECT_END_DATE,
    FIELD_REMARKS: DATA_PROJECT_REMARKS,
    FIELD_TEAM: DATA_PROJECT_TEAM,
    FIELD_STATUS: DATA_PROJECT_STATUS,
    FIELD_IS_WEB_APP_FINISHED: DATA_PROJECT_IS_WEB_APP_FINISHED,
    FIELD_IS_FIELD_WORK_STARTED: DATA_PROJECT_IS_FIELD_WORK_STARTED,
    FIELD_FREQUENCY: DATA_FREQUENCY,
    FIELD_FREQUENCY_OPTIONS: DATA_FREQUENCY_OPTION,
    FIELD_RECURRENCE_END_DATE: DATA_RECURRENCE_END_DATE,
    FIELD_NOTIFICATION_ENABLED: DATA_NOTIFICATION_ENABLED,
}

TODO_FIELD_MAP = {
    FIELD_TITLE: DATA_TITLE,
    FIELD_DATE: DATA_TODO_DATE,
    FIELD_DEADLINE: DATA_TODO_DEADLINE,
    FIELD_IMPORTANCE: DATA_TODO_IMPORTANCE,
    FIELD_CONTENT: DATA_TODO_CONTENT,
    FIELD_CATEGORY: DATA_TODO_CATEGORY,
    FIELD_IS_FINISHED: DATA_TODO_IS_FINISHED,
    FIELD_FREQUENCY: DATA_FREQUENCY,
    FIELD_FREQUENCY_OPTIONS: DATA_FREQUENCY_OPTION,
    FIELD_RECURRENCE_END_DATE: DATA_RECURRENCE_END_DATE,
    FIELD_NOTIFICATION_ENABLED: DATA_NOTIFICATION_ENABLED,
}

# ------------------------------------------------------------------------------------------------
# Calendar
# ------------------------------------------------------------------------------------------------
CALENDAR_UID_SUFFIX_PROJECTS = "_projects_calendar"
CALENDAR_UID_SUFFIX_TODOS = "_todos_calendar"
TRANS_KEY_CALENDAR_PROJECTS = "projects"
TRANS_KEY_CALENDAR_TODOS = "todos"
CALENDAR_DONE_PREFIX = "[done]"
ATTR_RECURRENCE_RULES = "recurrence_rules"

# ------------------------------------------------------------------------------------------------
# Translation / Error Keys
# ------------------------------------------------------------------------------------------------
TRANS_KEY_ERROR_SINGLE_INSTANCE = "single_instance_allowed"

ERROR_PROJECT_NOT_FOUND_FMT = "Project '{}' not found"
ERROR_TODO_NOT_FOUND_FMT = "Todo '{}' not found"
ERROR_INVALID_DELETE_MODE_FMT = "Invalid delete mode '{}'"
ERROR_IMPORT_DUPLICATE_IDS = "Backup contains duplicate ids"
MSG_NO_ENTRY_FOUND = "No Project Calendar entry found"

# Backup payload keys
DATA_EXPORT_PROJECTS = "projects"
DATA_EXPORT_TODOS = "todos"
DATA_EXPORT_DATE = "exportDate"
