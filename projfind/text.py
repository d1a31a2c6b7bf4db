"""Centralized user-facing text for projfind CLI."""

from __future__ import annotations

class Styles:
    ERROR = "red"
    WARNING = "yellow"
    SUCCESS = "green"
    INFO = "dim"
    TITLE = "bold cyan"
    TABLE_HEADER = "bold magenta"


class Messages:
    APP_HELP = "projfind – list and open files of the current project by name."
    HELP_VERBOSE = "Log cache and search activity to stderr."
    HELP_PATH = "Directory to start the project root lookup from."
    HELP_PATTERN = "Glob pattern for file names (repeatable). Defaults to the configured patterns."
    HELP_OPTIONS = "Extra arguments appended verbatim to the `find` command."
    HELP_LIMIT = "Maximum number of files to list."
    HELP_FULL_PATHS = "Show paths relative to the project root instead of short names."
    HELP_BACKEND = "File search backend: find or walk."
    HELP_FORMAT = "Output format: rich (table) or porcelain (tab separated)."
    HELP_QUERY = "Text used to narrow down file names."
    HELP_ROOT = "Print the project root for the given path."
    HELP_LIST = "List project files under the project root."
    HELP_PICK = "Pick a project file by name and print its absolute path."
    HELP_CONFIG = "Show or update the stored configuration."
    HELP_DOCTOR = "Check the search tooling and the project fingerprint."
    HELP_SHOW_CONFIG = "Show current configuration."
    HELP_SET_PATTERNS = "Replace the default file name patterns (repeatable)."
    HELP_SET_OPTIONS = "Set the extra `find` arguments."
    HELP_SET_LIMIT = "Set the maximum number of listed files."
    HELP_SET_FULL_PATHS = "Set whether full relative paths are displayed (true/false)."
    HELP_SET_BACKEND = "Set the file search backend (find/walk)."
    HELP_SET_ROOT = "Always use this directory as the project root."
    HELP_CLEAR_ROOT = "Remove the stored project root override."
    HELP_ADD_MARKER = "Add a marker file name used to detect the project root (repeatable)."
    HELP_SET_GITIGNORE = "Set whether the walk backend honours .gitignore files (true/false)."

    ERROR_NO_ROOT = "No project root found from {path} (looked for: {markers})."
    ERROR_LIMIT_INVALID = "limit must be greater than 0"
    ERROR_BACKEND_INVALID = "Unsupported backend '{value}'. Allowed values: {allowed}."
    ERROR_BOOLEAN_INVALID = "Invalid boolean value '{value}'. Use true/false."
    ERROR_CONFIG_VALUE_INVALID = "Config value for '{field}' is invalid."
    ERROR_CONFIG_JSON_INVALID = "Config JSON must be an object."
    ERROR_NAME_UNKNOWN = "No project file is named '{name}'."
    ERROR_PICK_INVALID = "'{value}' is not one of the listed files."
    ERROR_ROOT_NOT_DIRECTORY = "Root override is not a directory: {path}"

    INFO_NO_FILES = "No matching files found under {path}."
    INFO_NO_MATCHES = "No project file matches '{query}'."
    INFO_ROOT = "{path}"
    INFO_CONFIG_SUMMARY = (
        "Project markers: {markers}\n"
        "Root override: {root}\n"
        "Patterns: {patterns}\n"
        "Find options: {options}\n"
        "Limit: {limit}\n"
        "Full paths: {full_paths}\n"
        "Backend: {backend}\n"
        "Respect .gitignore: {gitignore}"
    )
    INFO_CONFIG_UPDATED = "Configuration saved to {path}."
    INFO_CONFIG_UNCHANGED = "Nothing to update."
    INFO_PICK_PROMPT = "Select a file (number or name)"
    INFO_FILES_SUMMARY = "{count} file{plural} ({source}): {path}"
    INFO_SOURCE_CACHE = "cached"
    INFO_SOURCE_SCAN = "fresh scan"

    DOCTOR_FIND_FOUND = "`find` command is available at {path}."
    DOCTOR_FIND_MISSING = "`find` command is not on PATH; use `--backend walk`."
    DOCTOR_ROOT_FOUND = "Project root: {path}"
    DOCTOR_ROOT_MISSING = "No project root found from {path}."
    DOCTOR_FINGERPRINT = "Fingerprint: {value}"
    DOCTOR_FINGERPRINT_NONE = "No fingerprint; every lookup rescans the tree."
    DOCTOR_COMMAND = "Search command: {command}"

    TABLE_TITLE = "Project files"
    TABLE_HEADER_INDEX = "#"
    TABLE_HEADER_NAME = "Name"
    TABLE_HEADER_PATH = "Path"
