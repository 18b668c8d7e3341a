"""Clean command implementation.

with_output_cleanup() composes a project's clean step with removal of the
generated grammar sources: the wrapped clean runs first, then the configured
output directory is deleted even if the wrapped clean raised.

    clean = with_output_cleanup(my_clean)
    clean(project)
"""

import functools
import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, List, TypeVar

from antlrgen.output import log

if TYPE_CHECKING:
    from antlrgen.config.project_config import ProjectConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


def delete_output_tree(path: Path) -> bool:
    """Recursively delete a file or directory tree.

    Args:
        path: Path to remove; a missing path is not an error

    Returns:
        True if something was removed
    """
    path = Path(path)
    if not path.exists() and not path.is_symlink():
        logger.debug(f"Nothing to remove at {path}")
        return False

    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()
    log(f"Removed {path}", verbose_only=True)
    return True


def clean_targets(project: "ProjectConfig") -> List[Path]:
    """Base clean step: remove the project's configured clean-targets.

    Returns:
        Paths that were actually removed
    """
    return [target for target in project.clean_targets if delete_output_tree(target)]


def with_output_cleanup(clean_fn: Callable[..., T]) -> Callable[..., T]:
    """Wrap a clean operation so the grammar output tree is removed after it.

    Args:
        clean_fn: Clean operation taking the ProjectConfig as first argument

    Returns:
        Wrapper with the same signature and return value as clean_fn
    """

    @functools.wraps(clean_fn)
    def wrapper(project: "ProjectConfig", *args: Any, **kwargs: Any) -> T:
        try:
            return clean_fn(project, *args, **kwargs)
        finally:
            delete_output_tree(project.output_dir)

    return wrapper


clean_project = with_output_cleanup(clean_targets)
