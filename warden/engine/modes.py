"""
Mode Coordinator for Warden.

Owns the persistent behavioural modes (guard and follow) and re-derives
what the agent should be doing from world observations on every tick.

Evaluation order each tick is fixed: guard first, then follow. The
movement collaborator holds a single goal, so when both modes want to
move in the same tick the follow goal replaces the guard goal.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from warden.engine.completions import CompletionTracker
from warden.engine.models import AgentConfig, FollowMode, GuardMode, GuardState
from warden.models import GoalNear

if TYPE_CHECKING:
    from warden.engine.world import WorldQuery
    from warden.models import Player, Vec3
    from warden.world.interfaces import CombatCollaborator, MovementCollaborator

logger = logging.getLogger(__name__)


class ModeCoordinator:
    """
    Guard and follow modes plus their per-tick evaluation.

    Mode state changes only through the public operations here; callers
    get copies from the `guard` and `follow` properties.
    """

    def __init__(
        self,
        world: WorldQuery,
        movement: MovementCollaborator,
        combat: CombatCollaborator,
        config: AgentConfig | None = None,
        completions: CompletionTracker | None = None,
    ) -> None:
        self.world = world
        self.movement = movement
        self.combat = combat
        self.config = config or AgentConfig()
        self.completions = completions or CompletionTracker()
        self._guard = GuardMode()
        self._follow = FollowMode()

    # =========================================================================
    # State
    # =========================================================================

    @property
    def guard(self) -> GuardMode:
        return self._guard.model_copy(deep=True)

    @property
    def follow(self) -> FollowMode:
        return self._follow.model_copy(deep=True)

    @property
    def follow_target(self) -> Player | None:
        return self._follow.target

    @property
    def guard_state(self) -> GuardState:
        """Inactive, idle at the anchor, or engaged in combat."""
        if not self._guard.active:
            return GuardState.INACTIVE
        if self.world.combat_target() is not None:
            return GuardState.ENGAGED
        return GuardState.IDLE

    def is_engaged(self) -> bool:
        return self.world.combat_target() is not None

    # =========================================================================
    # Guard
    # =========================================================================

    def set_guard(self, anchor: Vec3) -> None:
        """Start guarding `anchor`; head there now unless already fighting."""
        self._guard = GuardMode(active=True, anchor=anchor.model_copy())
        logger.info("Guarding %s", anchor)
        if not self.is_engaged():
            self._move_to_anchor()

    def clear_guard(self) -> None:
        """
        Stop guarding.

        Always asks the combat collaborator to stop and clears the movement
        goal, whether or not the guard was engaged.
        """
        self._guard = GuardMode()
        logger.info("Guard cleared")
        self.completions.schedule(self.combat.stop(), label="stop combat")
        self.movement.set_goal(None)

    def _move_to_anchor(self) -> None:
        if self._guard.anchor is None:
            return
        self.movement.set_goal(
            GoalNear(position=self._guard.anchor, radius=self.config.goal_radius)
        )

    # =========================================================================
    # Follow
    # =========================================================================

    def set_follow(self, target: Player) -> None:
        self._follow = FollowMode(active=True, target=target)
        logger.info("Following %s", target.username)

    def clear_follow(self) -> None:
        self._follow = FollowMode()
        logger.info("Follow cleared")

    # =========================================================================
    # Tick
    # =========================================================================

    def on_tick(self, now: float) -> None:
        """Re-evaluate guard, then follow, against the current world."""
        if self._guard.active:
            self._tick_guard()
        if self._follow.active:
            self._tick_follow()

    def _tick_guard(self) -> None:
        if self.is_engaged():
            return

        hostile = self.world.nearest_hostile_within(
            self.config.guard_scan_radius, self.world.agent_position()
        )

        if hostile is not None:
            logger.info("Attacking %s", hostile.id)
            self.completions.schedule(self.combat.attack(hostile), label="attack")
        else:
            # Repeating the same goal is a no-op for the movement collaborator
            self._move_to_anchor()

    def _tick_follow(self) -> None:
        target = self._follow.target
        if target is None:
            return

        # Re-resolve each tick; the stored player may be stale
        player = self.world.resolve_visible_player(target.username)
        if player is None or player.entity is None:
            return

        self.movement.set_goal(
            GoalNear(position=player.entity.position.model_copy(), radius=self.config.goal_radius)
        )
