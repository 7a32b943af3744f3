"""
crontab integration for the single-shot checks.

Installs one marked block into the user's crontab:

    # >>> netwatch >>>
    */5 * * * * cd /opt/netwatch && /usr/bin/python3 main.py dns >> /var/log/netwatch/cron.log 2>&1
    ...
    # <<< netwatch <<<

Lines outside the block are never touched. The interface poller loops on its
own and is not scheduled here.
"""

import os
import subprocess
import sys
from pathlib import Path

BLOCK_START = "# >>> netwatch >>>"
BLOCK_END = "# <<< netwatch <<<"

# config section -> CLI command
JOB_COMMANDS = {
    "dns_check": "dns",
    "network_health": "health",
    "firewall_audit": "audit",
    "ssl_expiry": "ssl",
}


def cron_schedule(minutes: int) -> str:
    """Convert an interval in minutes into a crontab time spec."""
    if minutes <= 0:
        raise ValueError("interval must be positive")
    if minutes < 60:
        return f"*/{minutes} * * * *"
    if minutes % 1440 == 0:
        days = minutes // 1440
        return "0 0 * * *" if days == 1 else f"0 0 */{days} * *"
    if minutes % 60 == 0:
        return f"0 */{minutes // 60} * * *"
    raise ValueError(f"interval {minutes}m is not expressible in cron (use <60, whole hours, or whole days)")


class CronManager:
    def __init__(self, project_dir: str, python_path: str = None, config_path: str = None,
                 output_log: str = None):
        """
        Args:
            project_dir: Absolute path to the netwatch project directory
            python_path: Python interpreter for the jobs (defaults to the current one)
            config_path: Optional config file passed to every job
            output_log: File receiving the jobs' stdout/stderr
        """
        self.project_dir = Path(project_dir).resolve()
        self.python_path = python_path or sys.executable
        self.config_path = config_path
        self.output_log = output_log or str(self.project_dir / "cron.log")
        self.main_py = str(self.project_dir / "main.py")

    def job_line(self, section: str, minutes: int) -> str:
        command = JOB_COMMANDS[section]
        config_arg = f" --config {self.config_path}" if self.config_path else ""
        return (
            f"{cron_schedule(minutes)} cd {self.project_dir} && "
            f"{self.python_path} {self.main_py}{config_arg} {command} "
            f">> {self.output_log} 2>&1"
        )

    def render(self, intervals: dict) -> list:
        """Render the marked block for every check with a positive interval."""
        lines = [BLOCK_START]
        for section in JOB_COMMANDS:
            minutes = intervals.get(section)
            if minutes:
                lines.append(self.job_line(section, minutes))
        lines.append(BLOCK_END)
        return lines

    @staticmethod
    def strip_block(crontab: str) -> list:
        """Remove an existing netwatch block, keeping every other line."""
        kept = []
        inside = False
        for line in crontab.splitlines():
            if line.strip() == BLOCK_START:
                inside = True
                continue
            if line.strip() == BLOCK_END:
                inside = False
                continue
            if not inside:
                kept.append(line)
        return kept

    def merge(self, crontab: str, intervals: dict) -> str:
        lines = self.strip_block(crontab)
        while lines and not lines[-1].strip():
            lines.pop()
        lines.extend(self.render(intervals))
        return "\n".join(lines) + "\n"

    def read_crontab(self) -> str:
        result = subprocess.run(["crontab", "-l"], capture_output=True, text=True, timeout=10)
        if result.returncode != 0:
            # "no crontab for user" is an empty crontab
            if "no crontab" in result.stderr.lower():
                return ""
            raise RuntimeError(f"crontab -l failed: {result.stderr.strip()}")
        return result.stdout

    def write_crontab(self, content: str):
        result = subprocess.run(["crontab", "-"], input=content, capture_output=True,
                                text=True, timeout=10)
        if result.returncode != 0:
            raise RuntimeError(f"crontab install failed: {result.stderr.strip()}")

    def install(self, intervals: dict) -> list:
        """Install or replace the netwatch block. Returns the installed job lines."""
        Path(self.output_log).parent.mkdir(parents=True, exist_ok=True)
        content = self.merge(self.read_crontab(), intervals)
        self.write_crontab(content)
        return self.render(intervals)[1:-1]

    def uninstall(self) -> bool:
        """Remove the netwatch block. Returns False if none was installed."""
        current = self.read_crontab()
        if BLOCK_START not in current:
            return False
        lines = self.strip_block(current)
        self.write_crontab("\n".join(lines) + "\n" if lines else "")
        return True

    def installed_jobs(self) -> list:
        current = self.read_crontab()
        jobs = []
        inside = False
        for line in current.splitlines():
            if line.strip() == BLOCK_START:
                inside = True
            elif line.strip() == BLOCK_END:
                inside = False
            elif inside and line.strip():
                jobs.append(line)
        return jobs


def default_project_dir() -> str:
    return os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
