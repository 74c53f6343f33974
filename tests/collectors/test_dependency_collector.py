"""Tests for manifest parsing."""

from __future__ import annotations

from codescope.collectors.dependencies import (
    DependencyCollector,
    parse_go_mod,
    parse_gradle,
    parse_package_json,
    parse_pom,
    parse_pyproject,
    parse_requirements,
)
from tests._fixtures.repo_builder import RepoBuilder


def _names(deps) -> list[tuple[str, str, str]]:
    return [(dep.name, dep.version, dep.type) for dep in deps]


def test_parse_requirements_skips_comments_options_and_markers() -> None:
    deps = parse_requirements(
        "# pinned\nrequests>=2.31  # http\n-r other.txt\nuvicorn[standard]==0.30; python_version > '3.8'\nrich\n"
    )

    assert _names(deps) == [
        ("requests", ">=2.31", "runtime"),
        ("uvicorn", "==0.30", "runtime"),
        ("rich", "*", "runtime"),
    ]


def test_parse_pyproject_reads_project_and_poetry_tables() -> None:
    deps = parse_pyproject(
        """
[project]
dependencies = ["PyYAML>=6"]

[project.optional-dependencies]
service = ["fastapi>=0.110"]

[tool.poetry.dependencies]
python = "^3.11"
httpx = {version = "^0.27"}

[tool.poetry.group.test.dependencies]
pytest = "^8"
"""
    )

    assert _names(deps) == [
        ("PyYAML", ">=6", "runtime"),
        ("fastapi", ">=0.110", "optional"),
        ("httpx", "^0.27", "runtime"),
        ("pytest", "^8", "dev"),
    ]


def test_parse_package_json_maps_sections_to_types() -> None:
    deps = parse_package_json(
        '{"dependencies": {"react": "^18.2.0"}, "devDependencies": {"vitest": "^1.0.0"},'
        ' "peerDependencies": {"react-dom": "^18"}}'
    )

    assert _names(deps) == [
        ("react", "^18.2.0", "runtime"),
        ("vitest", "^1.0.0", "dev"),
        ("react-dom", "^18", "peer"),
    ]
    assert {dep.source for dep in deps} == {"npm"}


def test_parse_go_mod_handles_blocks_and_indirect() -> None:
    deps = parse_go_mod(
        """
module example.com/app

go 1.22

require github.com/gin-gonic/gin v1.9.1

require (
\tgithub.com/stretchr/testify v1.8.4
\tgolang.org/x/text v0.14.0 // indirect
)
"""
    )

    assert _names(deps) == [
        ("github.com/gin-gonic/gin", "v1.9.1", "runtime"),
        ("github.com/stretchr/testify", "v1.8.4", "runtime"),
        ("golang.org/x/text", "v0.14.0", "optional"),
    ]


def test_parse_pom_and_gradle_use_group_artifact_names() -> None:
    pom = parse_pom(
        """<project xmlns="http://maven.apache.org/POM/4.0.0">
  <dependencies>
    <dependency><groupId>org.springframework</groupId><artifactId>spring-core</artifactId><version>6.1.0</version></dependency>
    <dependency><groupId>junit</groupId><artifactId>junit</artifactId><scope>test</scope></dependency>
  </dependencies>
</project>"""
    )
    gradle = parse_gradle(
        "dependencies {\n"
        "    implementation 'com.google.guava:guava:33.0.0-jre'\n"
        "    testImplementation(\"org.junit.jupiter:junit-jupiter:5.10.0\")\n"
        "    compileOnly 'org.projectlombok:lombok'\n"
        "}\n"
    )

    assert _names(pom) == [
        ("org.springframework:spring-core", "6.1.0", "runtime"),
        ("junit:junit", "*", "dev"),
    ]
    assert _names(gradle) == [
        ("com.google.guava:guava", "33.0.0-jre", "runtime"),
        ("org.junit.jupiter:junit-jupiter", "5.10.0", "dev"),
        ("org.projectlombok:lombok", "*", "optional"),
    ]


def test_collector_reads_root_manifests_and_skips_broken_ones(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "requirements.txt": "requests==2.31.0\n",
            "package.json": "{ not json",
            "go.mod": "module x\n\nrequire github.com/pkg/errors v0.9.1\n",
        }
    )

    output = DependencyCollector(repo_builder.path()).collect("full")

    assert [dep.name for dep in output["dependencies"]] == ["requests", "github.com/pkg/errors"]
    assert output["metadata"]["manifests"] == ["requirements.txt", "go.mod"]
    assert output["metadata"]["total_dependencies"] == 2
