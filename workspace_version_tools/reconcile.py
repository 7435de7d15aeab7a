"""Keep the prerelease line ahead of stable.

Whenever a package moves on stable, or one of its dependencies moves on the
prerelease line, its prerelease counterpart may have to move too, so that a
dependent resolving against the prerelease branch never sees a version equal
to or behind the stable one.
"""

from __future__ import annotations

import logging

from .models import BumpInstruction, PackageInfo
from .versions import PRERELEASE_LABEL, BumpMagnitude, Initiator, bump, with_prerelease

logger = logging.getLogger(__name__)


def compute_prerelease_instruction(
    prerelease_package: PackageInfo | None,
    stable_package: PackageInfo | None,
    stable_instruction: BumpInstruction | None,
    prerelease_parent_instruction: BumpInstruction | None,
    *,
    prerelease_label: str = PRERELEASE_LABEL,
) -> BumpInstruction | None:
    """Compute the prerelease bump a package needs, if any.

    Two candidate versions are considered:

    1. From the package's own stable change. A MAJOR or MINOR stable change
       breaks the prerelease API relative to the new stable version, so the
       prerelease leapfrogs it by a major step; a PATCH stable change only
       needs a patch step past the new stable version.
    2. From the dependency it was reached through on the prerelease line. A
       MAJOR parent change forces a major step past current stable; anything
       else forces a patch step.

    The higher candidate wins, and it is only applied when it is above the
    current prerelease version.

    Args:
        prerelease_package: The package on the prerelease channel.
        stable_package: The same package on the stable channel.
        stable_instruction: Stable bump just computed for this package.
        prerelease_parent_instruction: Prerelease bump of the dependency
            through which this package was reached.
        prerelease_label: Label attached to every prerelease version.

    Returns:
        The prerelease instruction, or None if there is nothing to reconcile
        or the prerelease version is already far enough ahead.
    """
    # Without both counterparts there is no distance to maintain.
    if prerelease_package is None or stable_package is None:
        return None

    candidates = []

    if stable_instruction is not None:
        if stable_instruction.magnitude is BumpMagnitude.PATCH:
            step = BumpMagnitude.PATCH
        else:
            step = BumpMagnitude.MAJOR
        candidates.append(
            with_prerelease(
                bump(stable_instruction.next_version, step, Initiator.DERIVED),
                prerelease_label,
            )
        )

    if prerelease_parent_instruction is not None:
        if prerelease_parent_instruction.magnitude is BumpMagnitude.MAJOR:
            step = BumpMagnitude.MAJOR
        else:
            step = BumpMagnitude.PATCH
        candidates.append(
            with_prerelease(
                bump(stable_package.semantic_version, step, Initiator.DERIVED),
                prerelease_label,
            )
        )

    if not candidates:
        return None

    candidate = max(candidates)
    current = prerelease_package.semantic_version
    if candidate <= current:
        logger.debug(
            "%s prerelease %s already at or beyond %s",
            prerelease_package.name,
            current,
            candidate,
        )
        return None

    return BumpInstruction(package=prerelease_package, next_version=candidate)
