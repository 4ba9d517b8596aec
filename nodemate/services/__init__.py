"""External collaborators: project inspection and the npm registry."""

from .npm_service import NpmService, PackageInfo, SearchResult
from .project_context import ContextDetection, ProjectContext, ProjectContextService

__all__ = [
    "NpmService",
    "PackageInfo",
    "SearchResult",
    "ContextDetection",
    "ProjectContext",
    "ProjectContextService",
]
