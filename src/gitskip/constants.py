"""
Central configuration for ignore-file compilation
"""

# Single source of truth for the ignore filename read at each project root
IGNORE_FILENAME = ".gitignore"

# Environment variable that holds a long skip-path pattern in the terminal
SKIP_PATH_VARIABLE_NAME = "Skip_Git_Paths"

# Option of the search binary that takes a path regex to skip
SKIP_PATH_OPTION = "--np"

# Suffix of the persisted "define variable" script, before the shell extension
EXPORT_SCRIPT_SUFFIX = ".set-git-skip-paths-env.tmp"

# Patterns longer than this are carried by SKIP_PATH_VARIABLE_NAME
DEFAULT_EXPORT_THRESHOLD = 200

# Hard command-line ceilings
WINDOWS_CMD_MAX_COMMAND_LENGTH = 8163
POSIX_MAX_COMMAND_LENGTH = 131072

# Limits for security and performance
MAX_IGNORE_FILE_SIZE = 1024 * 1024  # 1MB
MAX_DIAGNOSTICS = 20

# Characters kept when naming the export script after a project folder
TRIM_PROJECT_NAME_PATTERN = r"[^\w.-]+"
