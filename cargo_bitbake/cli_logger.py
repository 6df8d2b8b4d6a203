import datetime
import os
import sys
import traceback
from colorama import Fore, Style, init

# Initialize Colorama
init(autoreset=True)

LOG_DIR = os.path.join(os.path.expanduser("~"), ".cargo-bitbake", "logs")

QUIET = -1
NORMAL = 0
VERBOSE = 1
VERY_VERBOSE = 2


class Logger:
    def __init__(self):
        self.verbosity = NORMAL
        self.log_file = None

    def configure(self, quiet=False, verbose=0, log_file=False):
        """Apply the -q/-v flags and optionally start a log file."""
        self.verbosity = QUIET if quiet else min(verbose, VERY_VERBOSE)
        if log_file:
            os.makedirs(LOG_DIR, exist_ok=True)
            self.log_file = os.path.join(
                LOG_DIR,
                f"cargo-bitbake_{datetime.datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
            )
        else:
            self.log_file = None

    def _get_timestamp(self):
        return datetime.datetime.now().strftime("%H:%M:%S")

    def _log(self, level, message, color, err=False, prefix="", show_timestamp=True, min_verbosity=NORMAL):
        if self.log_file:
            with open(self.log_file, "a", encoding="utf-8") as f:
                f.write(f"[{self._get_timestamp()}] [{level}] {message}\n")

        if self.verbosity < min_verbosity:
            return
        # resolved per call so redirected streams are honoured
        stream = sys.stderr if err else sys.stdout
        if show_timestamp:
            timestamp = self._get_timestamp()
            print(f"{color}{Style.BRIGHT}[{timestamp}]{Style.RESET_ALL} {prefix}{message}{Style.RESET_ALL}", file=stream)
        else:
            print(f"{color}{prefix}{message}{Style.RESET_ALL}", file=stream)

    def info(self, message):
        self._log("INFO", message, Fore.CYAN)

    def success(self, message):
        self._log("SUCCESS", message, Fore.GREEN, prefix=f"{Style.BRIGHT}✓ {Style.RESET_ALL}{Fore.GREEN}")

    def warning(self, message):
        self._log("WARNING", message, Fore.YELLOW, err=True, min_verbosity=QUIET,
                  prefix=f"{Style.BRIGHT}⚠ {Style.RESET_ALL}{Fore.YELLOW}")

    def error(self, message):
        self._log("ERROR", message, Fore.RED, err=True, min_verbosity=QUIET,
                  prefix=f"{Style.BRIGHT}✖ {Style.RESET_ALL}{Fore.RED}")

    def debug(self, message):
        self._log("DEBUG", message, Fore.WHITE + Style.DIM, min_verbosity=VERBOSE)

    def trace(self, message):
        """Dump bulky text, such as a rendered recipe, at -vv."""
        for line in message.splitlines():
            self._log("TRACE", line, Fore.WHITE + Style.DIM, show_timestamp=False, min_verbosity=VERY_VERBOSE)

    # -------- Exception logging --------
    def exception(self, exc_type, exc_value, exc_traceback):
        self.error(f"An unhandled exception occurred: {exc_value}")
        formatted_lines = traceback.format_exception(exc_type, exc_value, exc_traceback)
        for line in formatted_lines:
            for sub_line in line.splitlines():
                if sub_line.strip():
                    self._log("TRACEBACK", f">> {sub_line}", Fore.RED, err=True, min_verbosity=VERBOSE)


logger = Logger()
