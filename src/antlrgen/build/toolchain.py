"""ANTLR toolchain provisioning.

Locates the two things needed to run the ANTLR 3 tool: a java executable and
the antlr-complete jar. The jar is taken from ANTLR_JAR, then from the
project's antlr-jar setting, and otherwise downloaded once from Maven Central
into the antlrgen cache:

    <cache root>/antlr/<version>/antlr-complete-<version>.jar

The cache root is ANTLRGEN_CACHE_DIR if set, else ~/.antlrgen/cache.
"""

import logging
import os
import shutil
import sys
import time
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

import requests

from antlrgen.errors import ToolchainError
from antlrgen.output import TimedLogger

if TYPE_CHECKING:
    from antlrgen.config.project_config import ProjectConfig

logger = logging.getLogger(__name__)

DEFAULT_ANTLR_VERSION = "3.5.3"
ANTLR_MAIN_CLASS = "org.antlr.Tool"
MAVEN_JAR_URL = "https://repo1.maven.org/maven2/org/antlr/antlr-complete/{version}/antlr-complete-{version}.jar"

_MAX_DOWNLOAD_RETRIES = 3
_RETRY_BACKOFF_BASE = 1.0
_CHUNK_SIZE = 64 * 1024


def get_cache_root() -> Path:
    """Get the antlrgen cache root, honouring ANTLRGEN_CACHE_DIR."""
    cache_env = os.environ.get("ANTLRGEN_CACHE_DIR")
    if cache_env:
        return Path(cache_env).resolve()
    return Path.home() / ".antlrgen" / "cache"


class AntlrToolchain:
    """Resolves java and the ANTLR jar, downloading the jar on first use.

    Resolution happens lazily on the first call to command_prefix() and is
    cached for the lifetime of the instance, so one run downloads at most once.
    """

    def __init__(
        self,
        version: str = DEFAULT_ANTLR_VERSION,
        jar_path: Optional[Path] = None,
        java: Optional[str] = None,
        cache_root: Optional[Path] = None,
    ):
        """Initialize the toolchain.

        Args:
            version: ANTLR version to download when no jar is configured
            jar_path: Explicit jar path (ANTLR_JAR still takes precedence)
            java: Explicit java executable
            cache_root: Cache root override (defaults to get_cache_root())
        """
        self.version = version
        self.jar_path = jar_path
        self.java = java
        self.cache_root = cache_root if cache_root is not None else get_cache_root()
        self._prefix: Optional[List[str]] = None

    @classmethod
    def from_project(cls, project: "ProjectConfig") -> "AntlrToolchain":
        return cls(version=project.antlr_version, jar_path=project.antlr_jar, java=project.java)

    @property
    def jar_url(self) -> str:
        return MAVEN_JAR_URL.format(version=self.version)

    @property
    def cached_jar_path(self) -> Path:
        return self.cache_root / "antlr" / self.version / f"antlr-complete-{self.version}.jar"

    def command_prefix(self) -> List[str]:
        """Return the argv prefix that runs the ANTLR tool.

        Returns:
            [java, "-cp", jar, "org.antlr.Tool"]

        Raises:
            ToolchainError: If java cannot be found or the jar cannot be obtained
        """
        if self._prefix is None:
            java = self.find_java()
            jar = self.ensure_jar()
            self._prefix = [java, "-cp", str(jar), ANTLR_MAIN_CLASS]
        return list(self._prefix)

    def find_java(self) -> str:
        """Locate the java executable.

        Order: explicit setting, $JAVA_HOME/bin/java, java on PATH.
        """
        if self.java:
            found = shutil.which(self.java)
            if found is None:
                raise ToolchainError(f"Configured java executable not found: {self.java}")
            return found

        java_home = os.environ.get("JAVA_HOME")
        if java_home:
            name = "java.exe" if sys.platform == "win32" else "java"
            candidate = Path(java_home) / "bin" / name
            if candidate.is_file():
                return str(candidate)
            logger.debug(f"JAVA_HOME is set but {candidate} does not exist")

        found = shutil.which("java")
        if found is None:
            raise ToolchainError("java not found. Install a JDK/JRE or set JAVA_HOME.")
        return found

    def ensure_jar(self) -> Path:
        """Return a usable ANTLR jar, downloading it into the cache if needed."""
        env_jar = os.environ.get("ANTLR_JAR")
        explicit = Path(env_jar) if env_jar else self.jar_path
        if explicit is not None:
            if not explicit.is_file():
                raise ToolchainError(f"ANTLR jar not found: {explicit}")
            return explicit

        jar = self.cached_jar_path
        if jar.is_file():
            logger.debug(f"Using cached ANTLR jar {jar}")
            return jar

        with TimedLogger(f"Downloading ANTLR {self.version}"):
            try:
                self._download(self.jar_url, jar)
            except requests.RequestException as e:
                raise ToolchainError(f"Failed to download {self.jar_url}: {e}") from e
            except OSError as e:
                raise ToolchainError(f"Failed to write {jar}: {e}") from e
        return jar

    def _download(self, url: str, dest: Path) -> None:
        """Download url to dest with retries on transient network failures.

        HTTP errors (404 and friends) are not retried.
        """
        dest.parent.mkdir(parents=True, exist_ok=True)
        temp_file = Path(str(dest) + ".download")

        for attempt in range(_MAX_DOWNLOAD_RETRIES):
            if attempt > 0:
                delay = _RETRY_BACKOFF_BASE * (2 ** (attempt - 1))
                logger.debug(f"Retrying download in {delay:.0f}s")
                time.sleep(delay)
            try:
                self._download_attempt(url, temp_file)
                temp_file.replace(dest)
                return
            except requests.HTTPError:
                _cleanup_temp_file(temp_file)
                raise
            except (requests.ConnectionError, requests.Timeout) as e:
                _cleanup_temp_file(temp_file)
                logger.warning(f"Download attempt {attempt + 1}/{_MAX_DOWNLOAD_RETRIES} failed for {url}: {e}")
                if attempt == _MAX_DOWNLOAD_RETRIES - 1:
                    raise
            except BaseException:
                _cleanup_temp_file(temp_file)
                raise

    def _download_attempt(self, url: str, temp_file: Path) -> None:
        response = requests.get(url, stream=True, timeout=30)
        response.raise_for_status()
        with open(temp_file, "wb") as f:
            for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                if chunk:
                    f.write(chunk)


def _cleanup_temp_file(temp_file: Path) -> None:
    try:
        temp_file.unlink(missing_ok=True)
    except OSError:
        pass
