"""
External command execution.

Wraps the handful of process operations the supervisor needs so callers can
swap in a fake runner without touching the OS process table.
"""

import re
import shutil
import subprocess
from typing import List, Optional, Tuple


class CommandRunner:
    """Runs, launches and kills external processes via subprocess"""

    def run(self, argv: List[str], timeout: float = 10, merge_stderr: bool = True) -> Tuple[str, int]:
        """
        Run a command to completion and capture its output.

        stderr is merged into stdout unless merge_stderr is False, in which
        case it is discarded. A missing executable or a timeout is reported as
        empty output with exit code 127 / -1 rather than raised, callers
        decide what an empty answer means.

        Returns:
            tuple[str, int]: (output, exit code)
        """
        try:
            result = subprocess.run(
                argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT if merge_stderr else subprocess.DEVNULL,
                text=True,
                timeout=timeout,
            )
        except FileNotFoundError:
            return '', 127
        except PermissionError:
            return '', 126
        except OSError:
            # e.g. ENOEXEC for a binary built for another architecture
            return '', 126
        except subprocess.TimeoutExpired:
            return '', -1
        return result.stdout or '', result.returncode

    def spawn_detached(self, argv: List[str], log_path: str) -> None:
        """
        Launch a command in its own session, appending stdout/stderr to log_path.

        No handle is kept; the process outlives this call.
        """
        with open(log_path, 'ab') as log_file:
            subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=log_file,
                stderr=subprocess.STDOUT,
                close_fds=True,
                start_new_session=True,
            )

    def kill_by_path(self, path: str) -> bool:
        """
        Kill every process whose command line contains path.

        pkill matches a regular expression, so the path is escaped.

        Returns:
            bool: True if at least one process was signalled
        """
        if not path:
            return False
        _, code = self.run(['pkill', '-f', '--', re.escape(path)])
        return code == 0

    def which(self, name: str) -> Optional[str]:
        """Look up an executable on PATH"""
        return shutil.which(name)
