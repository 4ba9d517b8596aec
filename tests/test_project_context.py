"""Tests for Node.js project detection."""

import json

import pytest

from nodemate.exceptions import ContextDetectionError
from nodemate.services import project_context
from nodemate.services.project_context import ProjectContext, ProjectContextService


def _write_package_json(root, **fields):
    data = {"name": "demo", "version": "1.0.0", **fields}
    (root / "package.json").write_text(json.dumps(data), encoding="utf-8")


@pytest.fixture
def probes(monkeypatch):
    """Fake `<tool> --version` answers; missing tools return None."""
    answers = {"node": "v20.11.1"}

    async def fake_probe(executable, timeout=5.0):
        return answers.get(executable)

    monkeypatch.setattr(project_context, "probe_version", fake_probe)
    return answers


@pytest.fixture
def service():
    return ProjectContextService(probe_timeout=1.0)


class TestDetectContext:
    @pytest.mark.asyncio
    async def test_express_project_with_pnpm_lock(self, tmp_path, probes, service):
        _write_package_json(
            tmp_path,
            dependencies={"express": "^4.19.0", "cors": "^2.8.5"},
            devDependencies={"nodemon": "^3.0.0"},
        )
        (tmp_path / "pnpm-lock.yaml").write_text("lockfileVersion: 6\n")

        context = await service.detect_context(tmp_path)

        assert context.framework == "express"
        assert context.package_manager == "pnpm"
        assert context.node_version == "v20.11.1"
        assert context.has_typescript is False
        assert context.dependencies == {"express": "^4.19.0", "cors": "^2.8.5"}
        assert context.dev_dependencies == {"nodemon": "^3.0.0"}
        assert context.package_json_path == str(tmp_path / "package.json")

    @pytest.mark.parametrize(
        "deps, expected",
        [
            ({"next": "14.0.0", "react": "18.2.0"}, "nextjs"),
            ({"react": "18.2.0"}, "react"),
            ({"@nestjs/core": "10.0.0"}, "nestjs"),
            ({"lodash": "4.17.21"}, "vanilla"),
        ],
    )
    @pytest.mark.asyncio
    async def test_framework_detection(self, tmp_path, probes, service, deps, expected):
        _write_package_json(tmp_path, dependencies=deps)
        context = await service.detect_context(tmp_path)
        assert context.framework == expected

    @pytest.mark.asyncio
    async def test_typescript_from_tsconfig(self, tmp_path, probes, service):
        _write_package_json(tmp_path)
        (tmp_path / "tsconfig.json").write_text("{}")

        assert (await service.detect_context(tmp_path)).has_typescript

    @pytest.mark.asyncio
    async def test_package_manager_falls_back_to_installed_tools(self, tmp_path, probes, service):
        _write_package_json(tmp_path)
        probes["yarn"] = "1.22.19"

        assert (await service.detect_context(tmp_path)).package_manager == "yarn"

    @pytest.mark.asyncio
    async def test_no_tools_means_npm_and_unknown_node(self, tmp_path, probes, service):
        _write_package_json(tmp_path)
        probes.clear()

        context = await service.detect_context(tmp_path)

        assert context.package_manager == "npm"
        assert context.node_version == "unknown"

    @pytest.mark.asyncio
    async def test_preferred_manager_wins(self, tmp_path, probes, service):
        _write_package_json(tmp_path)
        (tmp_path / "yarn.lock").write_text("")

        context = await service.detect_context(tmp_path, preferred_manager="npm")
        assert context.package_manager == "npm"

        context = await service.detect_context(tmp_path, preferred_manager="auto")
        assert context.package_manager == "yarn"

    @pytest.mark.asyncio
    async def test_missing_package_json(self, tmp_path, service):
        with pytest.raises(ContextDetectionError, match="No package.json found"):
            await service.detect_context(tmp_path)

    @pytest.mark.asyncio
    async def test_unreadable_package_json(self, tmp_path, service):
        (tmp_path / "package.json").write_text("{broken")
        with pytest.raises(ContextDetectionError, match="Failed to read or parse package.json"):
            await service.detect_context(tmp_path)


@pytest.mark.asyncio
async def test_detect_or_default_never_raises(tmp_path, service):
    detection = await service.detect_or_default(tmp_path)

    assert detection.defaulted
    assert detection.context.framework == "unknown"
    assert detection.context.package_manager == "npm"
    assert "package.json" in detection.error


class TestQueries:
    def test_installed_packages(self, tmp_path, service):
        _write_package_json(
            tmp_path, dependencies={"express": "^4.0.0"}, devDependencies={"jest": "^29.0.0"}
        )

        assert service.get_installed_packages(tmp_path) == {
            "express": "^4.0.0",
            "jest": "^29.0.0",
        }
        assert service.check_package_installed("jest", tmp_path)
        assert service.get_package_version("express", tmp_path) == "^4.0.0"
        assert service.get_package_version("koa", tmp_path) is None

    def test_installed_packages_without_project(self, tmp_path, service):
        assert service.get_installed_packages(tmp_path) == {}

    def test_summary(self):
        summary = ProjectContextService.generate_summary(
            ProjectContext(
                framework="nestjs",
                package_manager="yarn",
                node_version="v18.19.0",
                has_typescript=True,
                dependencies={"@nestjs/core": "10"},
                project_path="/srv/api",
            )
        )

        assert summary.splitlines()[0] == "📋 Project Context:"
        assert "• Framework: NestJS" in summary
        assert "• TypeScript: Yes" in summary
        assert "• Dependencies: 1 production, 0 development" in summary

    @pytest.mark.asyncio
    async def test_validate_project_structure(self, tmp_path, probes, service):
        (tmp_path / "package.json").write_text(
            json.dumps({"dependencies": {"typescript": "5.4.0"}, "devDependencies": {"express": "4"}})
        )
        context = await service.detect_context(tmp_path)

        issues = service.validate_project_structure(context)

        assert "package.json is missing a name field" in issues
        assert "package.json is missing a version field" in issues
        assert "Express framework detected but express is not in dependencies" in issues
        assert "TypeScript detected but typescript is not in devDependencies" in issues
