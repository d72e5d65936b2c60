"""
Exit codes for statusboard commands.

0 and 1 keep their usual meaning; the rest sit in the 64-113 range left
free for applications, plus 130 for Ctrl+C.
"""

GENERAL_ERROR = 1

NO_PROJECTS_FOUND = 64   # config resolves to no projects
API_ERROR = 65           # GitHub or npm request failed for the whole run
CONFIG_ERROR = 66        # config file unreadable or malformed
DATA_ERROR = 70          # index database unreadable or corrupt
PARTIAL_SUCCESS = 71     # index --strict: some sources failed
INTERRUPTED = 130

# Keyed by class name so sqlite3 errors map without importing sqlite3 here
EXCEPTION_EXIT_CODES = {
    'BatchQueryError': API_ERROR,
    'TransportError': API_ERROR,
    'OperationalError': DATA_ERROR,
    'DatabaseError': DATA_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: BaseException) -> int:
    """Exit code for an exception that reached a command handler."""
    if isinstance(exc, CommandError):
        return exc.exit_code
    return EXCEPTION_EXIT_CODES.get(type(exc).__name__, GENERAL_ERROR)


class CommandError(Exception):
    """An error that carries the exit code its command should end with."""

    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class NoProjectsFoundError(CommandError):
    def __init__(self, message: str = "No projects found"):
        super().__init__(message, NO_PROJECTS_FOUND)


class ConfigError(CommandError):
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)
