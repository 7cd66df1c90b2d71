"""Site building functionality for Quillpost.

This module contains the core logic for building a static site from post
sources. It loads configuration, loads posts, renders templates and writes
the output files.

Key functions:
- build_site: Main function to build the entire site.
- load_config: Loads site configuration from site.yml.

Key classes:
- SiteConfig: Site-level settings.
- SiteBuilder: Writes index, detail pages, feed and static files.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from .collections import PostCollection
from .content import PostLoader
from .errors import ConfigError, WriteError
from .feeds import RSSGenerator
from .templates import TemplateEngine

CONFIG_FILENAME = "site.yml"
MAX_POLL_MS = 60_000

DEFAULT_CONFIG = {
    "title": "Blog",
    "description": "",
    "author": None,
    "base_url": "http://localhost:8080",
    "posts_dir": "posts",
    "static_dir": "static",
    "dist_dir": "dist",
    "templates_dir": "templates",
    "host": "127.0.0.1",
    "port": 8080,
    "poll_ms": 500,
}


@dataclass
class SiteConfig:
    """Site-level settings.

    Directory settings are relative to the project root unless absolute.
    """

    title: str = DEFAULT_CONFIG["title"]
    description: str = DEFAULT_CONFIG["description"]
    author: str | None = DEFAULT_CONFIG["author"]
    base_url: str = DEFAULT_CONFIG["base_url"]
    posts_dir: str = DEFAULT_CONFIG["posts_dir"]
    static_dir: str = DEFAULT_CONFIG["static_dir"]
    dist_dir: str = DEFAULT_CONFIG["dist_dir"]
    templates_dir: str = DEFAULT_CONFIG["templates_dir"]
    host: str = DEFAULT_CONFIG["host"]
    port: int = DEFAULT_CONFIG["port"]
    poll_ms: int = DEFAULT_CONFIG["poll_ms"]

    @classmethod
    def from_mapping(cls, values: dict[str, Any], source: Path | None = None) -> SiteConfig:
        """Build a config from a mapping, ignoring unknown keys.

        Raises:
            ConfigError: A numeric setting is not a number or out of range.
        """
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in values.items():
            if key not in known or value is None:
                continue
            if key in ("port", "poll_ms"):
                kwargs[key] = _integer(key, value, source)
            else:
                kwargs[key] = str(value)
        config = cls(**kwargs)
        if not 1 <= config.poll_ms <= MAX_POLL_MS:
            raise ConfigError(f"poll_ms must be between 1 and {MAX_POLL_MS}", source)
        if not 0 < config.port < 65536:
            raise ConfigError(f"invalid port {config.port}", source)
        return config


def _integer(key: str, value: Any, source: Path | None) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be a number, got {value!r}", source)
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} must be a number, got {value!r}", source) from exc


def load_config(project_root: Path) -> SiteConfig:
    """Load site configuration from site.yml.

    Args:
        project_root: Root directory of the project.

    Returns:
        SiteConfig with defaults applied for missing keys.

    Raises:
        ConfigError: The file is not valid YAML or not a mapping.
    """
    config_path = project_root / CONFIG_FILENAME
    values = DEFAULT_CONFIG.copy()
    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"malformed YAML: {exc}", config_path) from exc
        except OSError as exc:
            raise ConfigError(f"cannot read config: {exc.strerror}", config_path) from exc
        if not isinstance(loaded, dict):
            raise ConfigError("config must be a mapping of settings", config_path)
        values.update(loaded)
    return SiteConfig.from_mapping(values, config_path)


@dataclass
class BuildResult:
    """Result of a site build operation.

    Attributes:
        posts: Published posts in site order.
        output_dir: Directory where the site was built.
        written: Every file written, in write order.
    """

    posts: PostCollection
    output_dir: Path
    written: list[Path] = field(default_factory=list)


class SiteBuilder:
    """Turns an ordered post collection into the site's output files.

    Writes ``<slug>.html`` for every post, ``feed.xml`` and ``index.html``.
    Existing files are overwritten; files that no longer belong to a post
    are left in place.

    Attributes:
        config: Site configuration.
        engine: Template engine for HTML pages.
        feed: Feed generator.
    """

    def __init__(
        self,
        config: SiteConfig,
        engine: TemplateEngine | None = None,
        feed: RSSGenerator | None = None,
    ):
        self.config = config
        self.engine = engine or TemplateEngine(config)
        self.feed = feed or RSSGenerator()

    def write(
        self,
        posts: PostCollection,
        output_dir: Path,
        static_dir: Path | None = None,
    ) -> list[Path]:
        """Write every artifact of the site.

        Static files are copied first so generated pages always win over a
        static file of the same name.

        Args:
            posts: Published posts in site order.
            output_dir: Output directory, created when missing.
            static_dir: Optional directory copied verbatim into the output.

        Returns:
            Paths written, in write order.

        Raises:
            WriteError: A directory or file could not be written.
            TemplateError: A page template failed.
        """
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise WriteError(output_dir, exc.strerror or str(exc)) from exc

        written: list[Path] = []
        if static_dir is not None and static_dir.is_dir():
            written.extend(self._copy_static(static_dir, output_dir))
        for post in posts:
            target = output_dir / post.filename
            written.append(self._write(target, self.engine.render_post(post)))
        written.append(
            self._write(output_dir / self.feed.filename, self.feed.generate(posts, self.config))
        )
        written.append(self._write(output_dir / "index.html", self.engine.render_index(posts)))
        return written

    def _write(self, path: Path, content: str) -> Path:
        try:
            with open(path, "w", encoding="utf-8", newline="\n") as f:
                f.write(content)
        except OSError as exc:
            raise WriteError(path, exc.strerror or str(exc)) from exc
        return path

    def _copy_static(self, static_dir: Path, output_dir: Path) -> list[Path]:
        copied: list[Path] = []
        for item in sorted(static_dir.rglob("*")):
            if item.is_dir():
                continue
            dest = output_dir / item.relative_to(static_dir)
            try:
                dest.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(item, dest)
            except OSError as exc:
                raise WriteError(dest, exc.strerror or str(exc)) from exc
            copied.append(dest)
        return copied


def build_site(
    project_root: Path,
    config: SiteConfig | None = None,
    output_dir_override: Path | None = None,
) -> BuildResult:
    """Build the entire static site.

    All posts are loaded and validated before anything is written, so a
    post error leaves the output directory untouched.

    Args:
        project_root: Root directory of the project.
        config: Optional preloaded configuration; read from site.yml if None.
        output_dir_override: Optional path to write the build output instead
            of the configured dist_dir.

    Returns:
        BuildResult containing the posts, output directory and written files.

    Raises:
        QuillpostError: Any build-fatal error.
    """
    config = config or load_config(project_root)
    posts = PostLoader(project_root / config.posts_dir).load()
    output_dir = output_dir_override or (project_root / config.dist_dir)
    engine = TemplateEngine(config, project_root / config.templates_dir)
    builder = SiteBuilder(config, engine)
    written = builder.write(posts, output_dir, project_root / config.static_dir)
    return BuildResult(posts=posts, output_dir=output_dir, written=written)
