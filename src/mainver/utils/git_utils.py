from git import Repo
from git.exc import BadName, BadObject, GitCommandError
from typing import Dict, List, Optional
import logging

from ..models import Commit

log = logging.getLogger(__name__)

# Record layout of the batch `git log` call used by load_commits().
COMMIT_START = "COMMIT_START "
FIELD_SEP = "\x1f"
RECORD_SEP = "\x1e"
LOG_FORMAT = f"{COMMIT_START}%H{FIELD_SEP}%P{FIELD_SEP}%ct{FIELD_SEP}%B{RECORD_SEP}"


def short_sha(sha: Optional[str]) -> str:
    return sha[:11] if sha else ""


def get_current_branch(repo: Repo) -> Optional[str]:
    try:
        return repo.active_branch.name
    except TypeError:
        # Detached HEAD state
        return None


def parse_log_output(output: str) -> Dict[str, Commit]:
    """Parse the output of `git log --format=LOG_FORMAT`.

    Args:
        output: Raw stdout of the log command.

    Returns:
        Dictionary mapping commit SHA to Commit.
    """
    result = {}
    for record in output.split(RECORD_SEP):
        record = record.lstrip("\n")
        if not record.startswith(COMMIT_START):
            continue

        parts = record[len(COMMIT_START) :].split(FIELD_SEP, 3)
        if len(parts) < 4:
            log.debug(f"Skipping malformed log record: {record[:60]!r}")
            continue

        sha, parents, timestamp, message = parts
        result[sha] = Commit(
            id=sha,
            parents=tuple(parents.split()),
            timestamp=int(timestamp) if timestamp else 0,
            message=message.rstrip("\n"),
        )
    return result


def load_commits(repo: Repo, include_remotes: bool = False) -> Dict[str, Commit]:
    """Load every commit reachable from branches and tags in one git call.

    This is much faster than creating GitPython Commit objects one by one,
    which matters for repositories with tens of thousands of commits.

    Args:
        repo: GitPython Repo object.
        include_remotes: Also walk remote-tracking branches.

    Returns:
        Dictionary mapping commit SHA to Commit. Empty for a repository
        without commits.
    """
    args = [f"--format={LOG_FORMAT}", "--branches", "--tags"]
    if include_remotes:
        args.append("--remotes")

    if not repo.refs:
        return {}

    output = repo.git.log(*args)
    commits = parse_log_output(output)
    log.debug(f"Loaded {len(commits)} commits from {repo.git_dir}")
    return commits


def get_commit(repo: Repo, sha: str) -> Optional[Commit]:
    """Load a single commit, or None if the repository does not have it."""
    try:
        git_commit = repo.commit(sha)
    except (BadName, BadObject, GitCommandError, ValueError) as e:
        log.debug(f"Cannot resolve commit {sha}: {e}")
        return None
    return Commit(
        id=git_commit.hexsha,
        parents=tuple(p.hexsha for p in git_commit.parents),
        timestamp=git_commit.committed_date,
        message=str(git_commit.message).rstrip("\n"),
    )


def list_tag_targets(repo: Repo) -> Dict[str, List[str]]:
    """Map commit SHAs to the names of the tags pointing at them.

    Annotated tags are peeled to their commit. Tags pointing at other
    object types are skipped.
    """
    tags: Dict[str, List[str]] = {}
    for tag in repo.tags:
        try:
            sha = tag.commit.hexsha
        except ValueError as e:
            log.debug(f"Skipping tag {tag.name}: {e}")
            continue
        tags.setdefault(sha, []).append(tag.name)
    return tags
