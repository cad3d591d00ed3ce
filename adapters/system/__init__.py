"""Host collectors backed by psutil, PowerShell and Linux sysfs/journald."""

from .host import LocalHost
from .shell import CommandError, run_command, run_powershell

__all__ = ["CommandError", "LocalHost", "run_command", "run_powershell"]
