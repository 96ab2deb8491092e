"""Projects: admission, lifecycle and owner-facing reads."""

from .enums import MediaKind, ProjectStatus
from .lifecycle import ProjectLifecycle
from .models import Project

__all__ = ["MediaKind", "Project", "ProjectLifecycle", "ProjectStatus"]
