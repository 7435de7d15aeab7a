"""Turn user-supplied bump requests into concrete bump instructions.

A request is the text "<package> <major|minor|patch>" plus the channel it is
aimed at. Stable requests bump the stable package directly. Prerelease
requests are measured against the stable version of the same package, so the
prerelease line is only moved when it is not already far enough ahead.
"""

from __future__ import annotations

import logging

import semver
from packaging.utils import canonicalize_name

from .errors import InstructionParseError, UnknownPackageError
from .models import BumpInstruction, ReleaseChannel
from .versions import PRERELEASE_LABEL, BumpMagnitude, Initiator, bump, with_prerelease
from .workspace import Workspace

logger = logging.getLogger(__name__)


def parse_instruction(text: str) -> tuple[str, BumpMagnitude]:
    """Split "<package> <magnitude>" on the first space.

    The package name is returned in its canonical (PEP 503) form, matching
    the keys of a discovered workspace.

    Raises:
        InstructionParseError: If either part is missing or the magnitude
            is not one of major/minor/patch.
    """
    name, _, magnitude = text.strip().partition(" ")
    if not name or not magnitude.strip():
        raise InstructionParseError(text, "expected '<package> <major|minor|patch>'")
    try:
        return canonicalize_name(name), BumpMagnitude.from_text(magnitude)
    except ValueError as exc:
        raise InstructionParseError(text, str(exc)) from None


def resolve_instruction(
    stable_workspace: Workspace,
    prerelease_workspace: Workspace,
    text: str,
    channel: ReleaseChannel,
    *,
    prerelease_label: str = PRERELEASE_LABEL,
) -> BumpInstruction | None:
    """Resolve one textual request into a bump instruction.

    Returns:
        The instruction, or None when the request is already satisfied or
        has nothing to apply to (prerelease package without a stable
        counterpart, prerelease already ahead of stable).

    Raises:
        InstructionParseError: Malformed request text.
        UnknownPackageError: The package is missing from the requested
            channel's workspace.
    """
    name, magnitude = parse_instruction(text)

    stable_package = stable_workspace.get(name)
    if stable_package is None:
        if channel is ReleaseChannel.STABLE:
            raise UnknownPackageError(name, stable_workspace.label)
        # Nothing on stable to keep the prerelease version ahead of.
        logger.info("Skipping '%s': %s has no stable counterpart", text, name)
        return None

    current_stable = stable_package.semantic_version

    if channel is ReleaseChannel.STABLE:
        return BumpInstruction(
            package=stable_package,
            next_version=bump(current_stable, magnitude, Initiator.END_USER),
        )

    prerelease_package = prerelease_workspace.get(name)
    if prerelease_package is None:
        raise UnknownPackageError(name, prerelease_workspace.label)

    current_prerelease = prerelease_package.semantic_version
    if _already_ahead(current_prerelease, current_stable, magnitude):
        logger.info(
            "Skipping '%s': prerelease %s is already a %s bump ahead of stable %s",
            text,
            current_prerelease,
            magnitude,
            current_stable,
        )
        return None

    next_version = with_prerelease(
        bump(current_stable, magnitude, Initiator.END_USER), prerelease_label
    )
    return BumpInstruction(package=prerelease_package, next_version=next_version)


def resolve_instructions(
    stable_workspace: Workspace,
    prerelease_workspace: Workspace,
    texts: list[str],
    channel: ReleaseChannel,
    *,
    prerelease_label: str = PRERELEASE_LABEL,
) -> list[BumpInstruction]:
    """Resolve a batch of requests, dropping the ones that are no-ops.

    Raises:
        BumpError: The first parse or unknown-package failure. Nothing in the
            batch is resolved if any entry fails.
    """
    instructions: list[BumpInstruction] = []
    for text in texts:
        instruction = resolve_instruction(
            stable_workspace,
            prerelease_workspace,
            text,
            channel,
            prerelease_label=prerelease_label,
        )
        if instruction is not None:
            instructions.append(instruction)
    return instructions


def _already_ahead(
    prerelease: semver.Version, stable: semver.Version, magnitude: BumpMagnitude
) -> bool:
    """Whether prerelease already leads stable at the requested tier or above."""
    if prerelease.major > stable.major:
        return True
    if magnitude is BumpMagnitude.MAJOR:
        return False
    if prerelease.minor > stable.minor:
        return True
    if magnitude is BumpMagnitude.MINOR:
        return False
    return prerelease.patch > stable.patch
