#!/usr/bin/env python3
"""
Project Context Detection
=========================

Inspects the Node.js project in the working directory: framework,
package manager, Node version, TypeScript usage and declared
dependencies. The chat session feeds the result into the system prompt.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from nodemate.exceptions import ContextDetectionError
from nodemate.utils.command_runner import DEFAULT_PROBE_TIMEOUT, probe_version

logger = logging.getLogger(__name__)

LOCK_FILES = (
    ("pnpm-lock.yaml", "pnpm"),
    ("yarn.lock", "yarn"),
    ("package-lock.json", "npm"),
)

FRAMEWORK_NAMES = {
    "express": "Express.js",
    "nestjs": "NestJS",
    "react": "React.js",
    "nextjs": "Next.js",
    "vanilla": "Vanilla Node.js",
    "unknown": "Unknown framework",
}


@dataclass
class ProjectContext:
    framework: str = "unknown"
    package_manager: str = "npm"
    node_version: str = "unknown"
    has_typescript: bool = False
    dependencies: Dict[str, str] = field(default_factory=dict)
    dev_dependencies: Dict[str, str] = field(default_factory=dict)
    project_path: str = ""
    package_json_path: str = ""


@dataclass
class ContextDetection:
    """
    Outcome of a best-effort detection.

    ``defaulted`` is True when detection failed and ``context`` holds
    fallback values; ``error`` then says why.
    """

    context: ProjectContext
    defaulted: bool = False
    error: Optional[str] = None


class ProjectContextService:
    def __init__(self, probe_timeout: float = DEFAULT_PROBE_TIMEOUT):
        self.probe_timeout = probe_timeout

    async def detect_context(
        self,
        project_path: Union[str, Path, None] = None,
        preferred_manager: Optional[str] = None,
    ) -> ProjectContext:
        """
        Raises:
            ContextDetectionError: No readable package.json in ``project_path``.
        """
        root = Path(project_path) if project_path else Path.cwd()
        package_json_path = root / "package.json"

        if not package_json_path.is_file():
            raise ContextDetectionError(
                "No package.json found. Are you in a Node.js project?",
                project_path=root,
            )

        package_json = self._read_package_json(package_json_path)

        if preferred_manager and preferred_manager != "auto":
            package_manager = preferred_manager
        else:
            package_manager = await self._detect_package_manager(root)

        return ProjectContext(
            framework=self._detect_framework(package_json),
            package_manager=package_manager,
            node_version=await self._get_node_version(),
            has_typescript=self._detect_typescript(package_json, root),
            dependencies=dict(package_json.get("dependencies") or {}),
            dev_dependencies=dict(package_json.get("devDependencies") or {}),
            project_path=str(root),
            package_json_path=str(package_json_path),
        )

    async def detect_or_default(
        self,
        project_path: Union[str, Path, None] = None,
        preferred_manager: Optional[str] = None,
    ) -> ContextDetection:
        """Never raises; falls back to an 'unknown' context."""
        try:
            context = await self.detect_context(project_path, preferred_manager)
        except ContextDetectionError as exc:
            logger.info("Project context unavailable: %s", exc.message)
            root = Path(project_path) if project_path else Path.cwd()
            return ContextDetection(
                context=ProjectContext(project_path=str(root)),
                defaulted=True,
                error=exc.message,
            )
        return ContextDetection(context=context)

    # --- Detection steps ---

    @staticmethod
    def _read_package_json(package_json_path: Path) -> Dict[str, Any]:
        try:
            with open(package_json_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ContextDetectionError(
                "Failed to read or parse package.json",
                project_path=package_json_path.parent,
                original_error=e,
            ) from e
        if not isinstance(data, dict):
            raise ContextDetectionError(
                "Failed to read or parse package.json",
                project_path=package_json_path.parent,
            )
        return data

    @staticmethod
    def _all_dependencies(package_json: Dict[str, Any]) -> Dict[str, str]:
        return {
            **(package_json.get("dependencies") or {}),
            **(package_json.get("devDependencies") or {}),
        }

    def _detect_framework(self, package_json: Dict[str, Any]) -> str:
        deps = self._all_dependencies(package_json)
        # next before react: every Next.js app also depends on react
        if "next" in deps:
            return "nextjs"
        if "react" in deps:
            return "react"
        if "@nestjs/core" in deps or "@nestjs/common" in deps:
            return "nestjs"
        if "express" in deps:
            return "express"
        return "vanilla"

    async def _detect_package_manager(self, root: Path) -> str:
        for lock_file, manager in LOCK_FILES:
            if (root / lock_file).exists():
                return manager

        for manager in ("pnpm", "yarn", "npm"):
            if await probe_version(manager, timeout=self.probe_timeout):
                return manager
        return "npm"

    async def _get_node_version(self) -> str:
        version = await probe_version("node", timeout=self.probe_timeout)
        return version or "unknown"

    def _detect_typescript(self, package_json: Dict[str, Any], root: Path) -> bool:
        deps = self._all_dependencies(package_json)
        if "typescript" in deps or "@types/node" in deps:
            return True
        return (root / "tsconfig.json").is_file()

    # --- Queries ---

    def get_installed_packages(self, project_path: Union[str, Path]) -> Dict[str, str]:
        try:
            package_json = self._read_package_json(Path(project_path) / "package.json")
        except ContextDetectionError:
            return {}
        return self._all_dependencies(package_json)

    def check_package_installed(self, package_name: str, project_path: Union[str, Path]) -> bool:
        return package_name in self.get_installed_packages(project_path)

    def get_package_version(
        self, package_name: str, project_path: Union[str, Path]
    ) -> Optional[str]:
        return self.get_installed_packages(project_path).get(package_name)

    @staticmethod
    def generate_summary(context: ProjectContext) -> str:
        framework_name = FRAMEWORK_NAMES.get(context.framework, context.framework)
        return "\n".join(
            [
                "📋 Project Context:",
                f"• Framework: {framework_name}",
                f"• Package Manager: {context.package_manager}",
                f"• Node Version: {context.node_version}",
                f"• TypeScript: {'Yes' if context.has_typescript else 'No'}",
                f"• Dependencies: {len(context.dependencies)} production, "
                f"{len(context.dev_dependencies)} development",
                f"• Project Path: {context.project_path}",
            ]
        )

    def validate_project_structure(self, context: ProjectContext) -> List[str]:
        issues: List[str] = []

        if context.node_version == "unknown":
            issues.append("Could not detect Node.js version")

        package_json = self._read_package_json(Path(context.package_json_path))
        if not package_json.get("name"):
            issues.append("package.json is missing a name field")
        if not package_json.get("version"):
            issues.append("package.json is missing a version field")

        if context.framework == "express" and "express" not in context.dependencies:
            issues.append("Express framework detected but express is not in dependencies")
        if context.framework == "nestjs" and "@nestjs/core" not in context.dependencies:
            issues.append(
                "NestJS framework detected but @nestjs/core is not in dependencies"
            )
        if context.has_typescript and "typescript" not in context.dev_dependencies:
            issues.append("TypeScript detected but typescript is not in devDependencies")

        return issues
