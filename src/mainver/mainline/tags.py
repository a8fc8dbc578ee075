from dataclasses import dataclass
from typing import Optional

from ..graph import CommitGraph
from ..models import Version


@dataclass(frozen=True)
class BaseVersion:
    """Starting point of a mainline walk.

    Attributes:
        version: Version the increments are applied to.
        source_sha: Tagged commit the walk starts after, None to walk from
            the root.
        tag: Name of the tag the version was read from.
    """

    version: Version
    source_sha: Optional[str] = None
    tag: Optional[str] = None


def find_base_version(
    graph: CommitGraph,
    tip: str,
    tag_prefix: str = "[vV]?",
    fallback: Optional[Version] = None,
) -> BaseVersion:
    """Find the nearest version tag on the first-parent chain of tip.

    If a commit carries several version tags the highest one is used. Tags
    that do not parse as versions are ignored.

    Args:
        graph: Commit graph of the run.
        tip: Commit to search back from.
        tag_prefix: Regex a version tag must start with.
        fallback: Version to use when no tag is found.

    Returns:
        BaseVersion for the nearest tag, or the fallback with no source.
    """
    for sha in graph.first_parent_chain(tip):
        best = None
        for name in graph.tags_for(sha):
            version = Version.parse(name, tag_prefix)
            if version is not None and (best is None or version > best.version):
                best = BaseVersion(version=version, source_sha=sha, tag=name)
        if best is not None:
            return best
    return BaseVersion(version=fallback or Version())
