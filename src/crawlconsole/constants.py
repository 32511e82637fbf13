"""Names shared by the store modules and the list views."""

# Detail page tabs
TAB_NAME_OVERVIEW = "overview"
TAB_NAME_FILES = "files"
TAB_NAME_GIT = "git"
TAB_NAME_TASKS = "tasks"
TAB_NAME_SCHEDULES = "schedules"
TAB_NAME_DATA = "data"
TAB_NAME_SETTINGS = "settings"
TAB_NAME_LOGS = "logs"

# Dialogs
DIALOG_CREATE_EDIT = "create_edit"
DIALOG_INSTALL = "install"
DIALOG_SETTINGS = "settings"

# Table
TABLE_COLUMN_NAME_ACTIONS = "_actions"

# Task log window
LOG_PAGE_SIZE = 1000
