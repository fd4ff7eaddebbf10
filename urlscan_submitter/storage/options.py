"""Plain-text option files: links, tags, visibility and user agent."""

import logging
from pathlib import Path

from .. import __version__
from ..api.models import Visibility, unique_tags
from ..config import (
    CUSTOM_USER_AGENT_FALLBACK,
    DEFAULT_OPTION_FILES,
    FIXED_TAGS_FILE,
    USER_AGENT_TYPES,
    USER_AGENTS,
)

logger = logging.getLogger(__name__)

LINKS_HEADER = DEFAULT_OPTION_FILES["links.txt"]
TAGS_HEADER = DEFAULT_OPTION_FILES["tags.txt"]


class OptionsStore:
    """
    Reads and writes the files under ``options/``.

    Each file holds one value per line; blank lines and lines starting
    with ``#`` are ignored. Missing files are recreated with defaults.
    """

    def __init__(self, options_dir: Path):
        self.options_dir = Path(options_dir)
        self.ensure_defaults()

    def ensure_defaults(self) -> None:
        """Create the options directory and any missing default files."""
        self.options_dir.mkdir(parents=True, exist_ok=True)
        for filename, content in DEFAULT_OPTION_FILES.items():
            path = self.options_dir / filename
            if not path.exists():
                path.write_text(content, encoding="utf-8")
                logger.info("Created %s", path)

    def path(self, filename: str) -> Path:
        return self.options_dir / filename

    def load_lines(self, filename: str) -> list[str]:
        """Meaningful lines of an option file."""
        path = self.path(filename)
        if not path.exists():
            if filename not in DEFAULT_OPTION_FILES:
                return []
            self.ensure_defaults()

        lines = []
        for line in path.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if line and not line.startswith("#"):
                lines.append(line)
        return lines

    def load_urls(self) -> list[str]:
        """URLs from links.txt. Lines without an http(s) scheme are skipped."""
        return [
            line for line in self.load_lines("links.txt")
            if line.startswith(("http://", "https://"))
        ]

    def load_tags(self) -> tuple[str, ...]:
        """Fixed tags followed by custom tags, without duplicates."""
        return unique_tags(self.load_lines(FIXED_TAGS_FILE) + self.load_lines("tags.txt"))

    def combine_tags(self, custom_tags: list[str]) -> tuple[str, ...]:
        """Fixed tags followed by the given tags, without duplicates."""
        return unique_tags(self.load_lines(FIXED_TAGS_FILE) + list(custom_tags))

    def get_visibility(self) -> Visibility:
        lines = self.load_lines("scan-visibility.txt")
        return Visibility.parse(lines[0] if lines else None)

    def set_visibility(self, visibility: str) -> Visibility:
        """
        Raises:
            ValueError: Unknown visibility.
        """
        value = Visibility(visibility.strip().lower())
        self.path("scan-visibility.txt").write_text(f"{value.value}\n", encoding="utf-8")
        logger.info("Visibility set to %s", value.value)
        return value

    def get_user_agent_type(self) -> str:
        lines = self.load_lines("user-agent.txt")
        agent_type = lines[0].lower() if lines else "default"
        return agent_type if agent_type in USER_AGENT_TYPES else "default"

    def get_user_agent(self) -> str:
        """Resolve the configured User-Agent string."""
        agent_type = self.get_user_agent_type()
        if agent_type == "custom":
            return self.get_custom_user_agent() or CUSTOM_USER_AGENT_FALLBACK
        return USER_AGENTS.get(agent_type, f"urlscan-submitter/{__version__}")

    def set_user_agent_type(self, agent_type: str) -> str:
        """
        Raises:
            ValueError: Unknown user agent type.
        """
        agent_type = agent_type.strip().lower()
        if agent_type not in USER_AGENT_TYPES:
            raise ValueError(
                f"Unknown user agent type: {agent_type} (expected one of {', '.join(USER_AGENT_TYPES)})"
            )
        self.path("user-agent.txt").write_text(f"{agent_type}\n", encoding="utf-8")
        logger.info("User agent set to %s", agent_type)
        return agent_type

    def get_custom_user_agent(self) -> str | None:
        lines = self.load_lines("custom-user-agent.txt")
        return lines[0] if lines else None

    def set_custom_user_agent(self, user_agent: str) -> None:
        content = DEFAULT_OPTION_FILES["custom-user-agent.txt"] + f"{user_agent.strip()}\n"
        self.path("custom-user-agent.txt").write_text(content, encoding="utf-8")

    def add_url(self, url: str) -> None:
        self._append_line("links.txt", url)

    def add_tag(self, tag: str) -> None:
        self._append_line("tags.txt", tag)

    def save_urls(self, urls: list[str]) -> None:
        self.path("links.txt").write_text(LINKS_HEADER + "\n".join(urls) + "\n", encoding="utf-8")

    def save_tags(self, tags: list[str]) -> None:
        self.path("tags.txt").write_text(TAGS_HEADER + "\n".join(tags) + "\n", encoding="utf-8")

    def list_files(self) -> dict[str, dict]:
        """Size and line count of each option file."""
        files = {}
        for path in sorted(self.options_dir.iterdir()):
            if path.is_file():
                files[path.name] = {
                    "path": str(path),
                    "size": path.stat().st_size,
                    "entries": len(self.load_lines(path.name)),
                }
        return files

    def _append_line(self, filename: str, value: str) -> None:
        value = value.strip()
        if not value:
            return
        path = self.path(filename)
        content = path.read_text(encoding="utf-8") if path.exists() else ""
        if content and not content.endswith("\n"):
            content += "\n"
        path.write_text(content + value + "\n", encoding="utf-8")
