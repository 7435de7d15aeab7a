"""Version parsing and bumping utilities.

Handles conversion between version strings and semver objects, the
magnitude of a change between two versions, and computing the next version
for a given magnitude. Versions below 1.0.0 follow the semver convention
that a minor increment is the breaking-change signal.
"""

from __future__ import annotations

import logging
from enum import Enum, IntEnum

import semver
from packaging.version import InvalidVersion
from packaging.version import Version as Pep440Version

logger = logging.getLogger(__name__)

PRERELEASE_LABEL = "alpha"

# PEP 440 normalises "1.0.0-alpha" to "1.0.0a0"; map the short forms back.
_PEP440_PRE_LABELS = {"a": "alpha", "b": "beta", "rc": "rc"}


class BumpMagnitude(IntEnum):
    """Severity of a version change. The ordering drives "highest bump wins"."""

    PATCH = 1
    MINOR = 2
    MAJOR = 3

    @classmethod
    def from_text(cls, text: str) -> BumpMagnitude:
        """Parse "major", "minor" or "patch", ignoring case.

        Raises:
            ValueError: For any other token.
        """
        try:
            return cls[text.strip().upper()]
        except KeyError:
            raise ValueError(f"unknown bump magnitude '{text}'") from None

    def __str__(self) -> str:
        return self.name.lower()


class Initiator(Enum):
    """Who asked for a bump.

    END_USER bumps are taken literally. DERIVED bumps are the ones pushed onto
    dependents automatically, and never move a 0.x package to 1.0.0.
    """

    END_USER = "end-user"
    DERIVED = "derived"


def parse_version(version_str: str) -> semver.Version:
    """Parse a version string into a semver.Version object.

    Handles incomplete versions by padding with zeros:
    - "1" → "1.0.0"
    - "1.2" → "1.2.0"
    - "1.2.3-alpha" → "1.2.3-alpha"

    PEP 440 spellings written by other tools are accepted too:
    - "3.0.0a0" → "3.0.0-alpha"
    - "3.0.0b2" → "3.0.0-beta.2"

    Raises:
        ValueError: If the string is neither semver nor PEP 440.
    """
    try:
        return semver.Version.parse(version_str, optional_minor_and_patch=True)
    except ValueError:
        pass

    try:
        pep440 = Pep440Version(version_str)
    except InvalidVersion:
        raise ValueError(f"{version_str!r} is not a valid version") from None

    major, minor, patch, *_ = (*pep440.release, 0, 0)
    prerelease = None
    if pep440.pre is not None:
        label, number = pep440.pre
        label = _PEP440_PRE_LABELS.get(label, label)
        prerelease = label if number == 0 else f"{label}.{number}"
    return semver.Version(major, minor, patch, prerelease=prerelease)


def magnitude_between(
    current: semver.Version, next_version: semver.Version
) -> BumpMagnitude:
    """Classify the change from current to next_version.

    Examples:
        1.0.0 → 2.0.0 is MAJOR, 1.0.0 → 1.1.0 is MINOR, 1.0.0 → 1.0.1 is PATCH
        0.1.0 → 0.2.0 is MAJOR (0.x minor increments are breaking)
    """
    if next_version.major > current.major or (
        current.major == 0
        and next_version.major == 0
        and next_version.minor > current.minor
    ):
        return BumpMagnitude.MAJOR
    if next_version.minor > current.minor:
        return BumpMagnitude.MINOR
    return BumpMagnitude.PATCH


def bump(
    version: semver.Version, magnitude: BumpMagnitude, initiator: Initiator
) -> semver.Version:
    """Return version bumped by magnitude, without any prerelease label.

    A MAJOR bump on a 0.x version only moves 1.0.0 when an end user asked for
    it; a derived MAJOR bump increments the minor field instead.

    Examples:
        bump(1.2.3, MAJOR, END_USER) → 2.0.0
        bump(0.2.3, MAJOR, END_USER) → 1.0.0
        bump(0.2.3, MAJOR, DERIVED) → 0.3.0
        bump(1.2.3, MINOR, DERIVED) → 1.3.0
        bump(1.2.3, PATCH, DERIVED) → 1.2.4
    """
    if magnitude is BumpMagnitude.MAJOR:
        if version.major > 0 or initiator is Initiator.END_USER:
            return version.bump_major()
        return version.bump_minor()
    if magnitude is BumpMagnitude.MINOR:
        if version.major == 0:
            logger.warning(
                "Minor bump of %s: below 1.0.0 a minor bump is a breaking change",
                version,
            )
        return version.bump_minor()
    return version.bump_patch()


def with_prerelease(
    version: semver.Version, label: str = PRERELEASE_LABEL
) -> semver.Version:
    """Attach the prerelease label: 2.0.0 → 2.0.0-alpha."""
    return version.replace(prerelease=label, build=None)


def without_prerelease(version: semver.Version) -> semver.Version:
    """Drop any prerelease label or build metadata: 2.0.0-alpha.3 → 2.0.0."""
    return version.finalize_version()
