"""
Descriptor of a locally installed package.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple, Union

from ..infrastructure.logger import logger
from ..models import PackageKind
from .header_parser import parse_flag, parse_header_comments, split_list


def split_package_id(package_id: str) -> Tuple[str, str]:
    """Split ``folder/file`` at the first separator."""

    folder, sep, file = package_id.strip("/").partition("/")
    if not sep or not folder or not file:
        raise ValueError(f"Package id must look like 'folder/file': {package_id!r}")
    return folder, file


def package_id_for(filename: Union[str, Path], root: Optional[Union[str, Path]] = None) -> str:
    """
    Relative ``folder/file`` id of a package entry file.

    Without ``root`` the file's own directory is taken as the package folder.
    """
    path = Path(filename)
    if root is None:
        return f"{path.parent.name}/{path.name}"
    return path.resolve().relative_to(Path(root).resolve()).as_posix()


@dataclass(frozen=True)
class LocalDescriptor:
    """Identity and declared metadata of an installed plugin or theme."""

    kind: PackageKind
    id: str
    filename: Optional[str] = None
    name: str = ""
    version: str = "0.0.0"
    description: str = ""

    # Provider
    repo_type: Optional[str] = None
    repo_id: Optional[str] = None
    github_repo: Optional[str] = None
    gitlab_repo: Optional[str] = None
    remote_file: Optional[str] = None
    release_asset: Optional[str] = None
    remote_visibility: str = "public"
    branch: str = "master"
    draft: bool = False
    prerelease: bool = False

    # Descriptive headers
    author: Optional[str] = None
    author_uri: Optional[str] = None
    homepage: Optional[str] = None
    requires: Optional[str] = None
    tested: Optional[str] = None
    requires_php: Optional[str] = None
    license: Optional[str] = None
    license_uri: Optional[str] = None
    donate_uri: Optional[str] = None
    update_uri: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    requires_plugins: List[str] = field(default_factory=list)

    comments: Optional[Dict[str, str]] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        split_package_id(self.id)
        if self.remote_file is None:
            object.__setattr__(self, "remote_file", self.file)

    @property
    def folder(self) -> str:
        return split_package_id(self.id)[0]

    @property
    def file(self) -> str:
        return split_package_id(self.id)[1]

    @property
    def slug(self) -> str:
        return self.folder

    @property
    def has_remote(self) -> bool:
        return bool(self.repo_type and self.repo_id)

    @property
    def is_private(self) -> bool:
        return self.remote_visibility == "private"

    @classmethod
    def from_comments(
        cls,
        kind: Union[PackageKind, str],
        package_id: str,
        comments: Optional[Mapping[str, str]],
        filename: Optional[str] = None,
    ) -> "LocalDescriptor":
        """Map parsed header fields onto a descriptor."""

        kind = PackageKind.coerce(kind)
        if not comments:
            return cls(kind=kind, id=package_id, filename=filename, comments=None)

        get = comments.get

        if "github_uri" in comments:
            repo_type, repo_id = "GitHub", get("github_uri")
        elif "gitlab_uri" in comments:
            repo_type, repo_id = "GitLab", get("gitlab_uri")
        else:
            repo_type, repo_id = get("repo_type"), get("repo_id")

        return cls(
            kind=kind,
            id=package_id,
            filename=filename,
            name=get("name") or "",
            version=get("version") or "0.0.0",
            description=get("description") or "",
            repo_type=repo_type or None,
            repo_id=repo_id or None,
            github_repo=get("github_uri"),
            gitlab_repo=get("gitlab_uri"),
            remote_file=get("remote_file") or None,
            release_asset=get("release_asset") or None,
            remote_visibility=(get("remote_visibility") or "public").strip().lower(),
            branch=get("primary_branch") or "master",
            draft=parse_flag(get("draft_release")),
            prerelease=parse_flag(get("pre_release")),
            author=get("author"),
            author_uri=get("author_uri"),
            homepage=get("uri"),
            requires=get("requires_at_least"),
            tested=get("tested") or get("tested_up_to") or get("compatible_up_to"),
            requires_php=get("requires_php"),
            license=get("license"),
            license_uri=get("license_uri"),
            donate_uri=get("donate_uri"),
            update_uri=get("update_uri"),
            tags=split_list(get("tags")),
            requires_plugins=split_list(get("depends")),
            comments=dict(comments),
        )

    @classmethod
    def from_file(
        cls,
        kind: Union[PackageKind, str],
        filename: Union[str, Path],
        root: Optional[Union[str, Path]] = None,
    ) -> "LocalDescriptor":
        """
        Build the descriptor of the package whose entry file is ``filename``.

        Args:
            kind: Plugin or theme
            filename: Path to the file carrying the header comment
            root: Directory holding all packages of this kind

        Returns:
            The descriptor; ``has_remote`` is False when no provider is declared
        """
        kind = PackageKind.coerce(kind)
        package_id = package_id_for(filename, root)
        comments = parse_header_comments(Path(filename), kind=kind)

        descriptor = cls.from_comments(kind, package_id, comments, filename=str(filename))
        if not descriptor.has_remote:
            logger.debug(f"No remote repository declared for {package_id}")
        return descriptor


__all__ = [
    "split_package_id",
    "package_id_for",
    "LocalDescriptor",
]
