"""Path Mapper - mirror a set of directories under a different root.

relativize() turns each directory into a root-independent RelativePath and
resolve() re-anchors those tokens under a new root. Neither function touches
the file system.

Round trip:
    resolve(root, relativize(root, dirs)) == [d.absolute() for d in dirs]
"""

from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Iterable, List


class InvalidPathRelation(AssertionError):
    """Raised when a directory is not located under the root it is relativized against.

    The scanner only yields descendants of the scan root, so this indicates
    a programming error rather than a user-facing condition.
    """

    pass


@dataclass(frozen=True)
class RelativePath:
    """Location of a directory relative to some root, as path segments.

    The root itself is the empty token (no segments).
    """

    parts: tuple[str, ...] = ()

    def resolve_against(self, root: Path) -> Path:
        """Anchor this token under root."""
        return Path(root).absolute().joinpath(*self.parts)

    @property
    def is_root(self) -> bool:
        return not self.parts

    def __str__(self) -> str:
        return str(PurePosixPath(*self.parts)) if self.parts else ""


def relativize(root: Path, children: Iterable[Path]) -> List[RelativePath]:
    """Express each child directory relative to root.

    Args:
        root: Root directory
        children: Directories equal to or below root

    Returns:
        One RelativePath per child, in input order

    Raises:
        InvalidPathRelation: If a child is not root or a descendant of root
    """
    abs_root = Path(root).absolute()
    tokens: List[RelativePath] = []
    for child in children:
        abs_child = Path(child).absolute()
        try:
            relative = abs_child.relative_to(abs_root)
        except ValueError:
            raise InvalidPathRelation(f"{abs_child} is not under {abs_root}") from None
        # Path(".").parts is empty, so root maps to the empty token
        tokens.append(RelativePath(relative.parts))
    return tokens


def resolve(new_root: Path, tokens: Iterable[RelativePath]) -> List[Path]:
    """Re-anchor relative tokens under new_root. Does not create directories."""
    return [token.resolve_against(new_root) for token in tokens]
