import logging
from typing import Iterable, Optional

from ..models import CommitIncrementMode, IncrementStrategy, Version
from ..utils.git_utils import short_sha
from .message_increments import MessageIncrementParser
from .walker import MainlineEvent, MergeEvent

log = logging.getLogger(__name__)


class VersionAccumulator:
    """Folds mainline events into a version.

    - a merge applies the increment of the branch it represents;
    - a plain commit applies the directive in its message, if any;
    - otherwise a per_commit owner applies its increment for every commit,
      while a once owner's increment is applied a single time when its
      segment ends, and only if nothing else in that segment bumped the
      version or a "+semver: none" directive asked to skip it.
    """

    def __init__(self, base: Version, messages: Optional[MessageIncrementParser] = None):
        self.base = base
        self.messages = messages or MessageIncrementParser()

    def fold(self, events: Iterable[MainlineEvent]) -> Version:
        version = self.base
        segment = _Segment()

        for event in events:
            if event.owner != segment.owner:
                version = segment.close(version)
                segment = _Segment(event.owner)

            if isinstance(event, MergeEvent):
                version = segment.apply(version, event.increment, event.commit.id)
                continue

            version = version.with_commit()
            directive = self.messages.parse(event.commit.message)
            if directive == IncrementStrategy.NONE:
                segment.skip_fallback = True
            elif directive is not None:
                version = segment.apply(version, directive, event.commit.id)
            elif event.config.commit_increments == CommitIncrementMode.PER_COMMIT:
                version = segment.apply(version, event.config.increment, event.commit.id)
            else:
                segment.fallback = event.config.increment

        return segment.close(version)


class _Segment:
    """Bookkeeping for the run of events owned by one branch."""

    def __init__(self, owner: Optional[str] = None):
        self.owner = owner
        self.incremented = False
        self.skip_fallback = False
        self.fallback: Optional[IncrementStrategy] = None

    def apply(self, version: Version, strategy: IncrementStrategy, sha: str) -> Version:
        if strategy == IncrementStrategy.NONE:
            return version
        self.incremented = True
        result = version.increment(strategy)
        log.debug(f"{short_sha(sha)}: {strategy.value} {version} -> {result}")
        return result

    def close(self, version: Version) -> Version:
        if self.fallback is None or self.incremented or self.skip_fallback:
            return version
        result = version.increment(self.fallback)
        log.debug(
            f"'{self.owner}' segment: {self.fallback.value} {version} -> {result}"
        )
        return result
