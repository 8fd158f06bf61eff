"""Core functionality for time tracking."""

from time_ledger.core.models import Client, Project, ProjectStatus, TimeLog, TimeLogTag, User
from time_ledger.core.tracker import TimeTracker

__all__ = ["User", "Client", "Project", "ProjectStatus", "TimeLog", "TimeLogTag", "TimeTracker"]
