"""
Capability table for enemy variants
Each variant picks its parameters, visual shape, transition policy and the
handler that runs for every state
"""

import math

from pygame.math import Vector3

from entities.enemy import Enemy, EnemyState, EnemyVariant, EnemyParams
from game.world import ShapeDescriptor
from utils.colors import COLOR_ENEMY_STALKER, COLOR_ENEMY_PACK_HUNTER, COLOR_ENEMY_AMBUSHER
from utils.constants import (
    ATTACK_RANGE, SEPARATION_RADIUS, CHASE_SEPARATION_WEIGHT,
    AMBUSH_RANGE, AMBUSH_COOLDOWN, AMBUSH_RETREAT_DISTANCE, AMBUSH_SPEED_MULTIPLIER,
)
from utils.helpers import safe_normalize, flat, flat_distance


class VariantBehavior:
    """
    One row of the capability table
    """
    def __init__(self, variant, params, color, initial_state=EnemyState.IDLE,
                 next_state=None, handlers=None):
        self.variant = variant
        self.params = params
        self.color = color
        self.initial_state = initial_state
        self.next_state = next_state or Enemy.next_state

        self.handlers = {
            EnemyState.IDLE: Enemy.update_idle,
            EnemyState.PATROL: Enemy.update_patrol,
            EnemyState.CHASE: Enemy.update_chase,
            EnemyState.ATTACK: Enemy.update_attack,
            EnemyState.HIDE: Enemy.update_hide,
            EnemyState.FLOCK: Enemy.update_idle,
        }
        if handlers:
            self.handlers.update(handlers)

    def create_visual(self, enemy):
        """Shape handed to the world renderer for this enemy"""
        p = enemy.params
        return ShapeDescriptor('box', (p.width, p.height, p.width), self.color)

    def __repr__(self):
        return f"VariantBehavior({self.variant.value})"


# ========== PACK HUNTER ==========

def live_pack_mates(enemy, ctx):
    """Pack-mates still alive in the population, looked up by id each tick"""
    if ctx.enemies is None:
        return []
    mates = []
    for mate_id in enemy.pack_ids:
        mate = ctx.enemies.get(mate_id)
        if mate is not None and mate is not enemy:
            mates.append(mate)
    return mates


def separation(enemy, mates):
    """Inverse-distance push away from pack-mates closer than the radius"""
    force = Vector3()
    for mate in mates:
        dist = flat_distance(enemy.position, mate.position)
        if 0 < dist < SEPARATION_RADIUS:
            force += safe_normalize(flat(enemy.position - mate.position)) / dist
    return force


def alignment(mates):
    """Average pack-mate velocity"""
    if not mates:
        return Vector3()
    force = Vector3()
    for mate in mates:
        force += flat(mate.velocity)
    return force / len(mates)


def cohesion(enemy, mates):
    """Unit pull toward the pack centroid"""
    if not mates:
        return Vector3()
    center = Vector3()
    for mate in mates:
        center += mate.position
    center /= len(mates)
    return safe_normalize(flat(center - enemy.position))


def flocking_force(enemy, mates):
    return separation(enemy, mates) + alignment(mates) + cohesion(enemy, mates)


def pack_next_state(enemy, ctx, distance, visible, illuminated):
    """
    Base policy, except an idle hunter with live pack-mates flocks instead of
    patrolling, and a flocking hunter whose pack is gone goes back to patrol
    """
    state = Enemy.next_state(enemy, ctx, distance, visible, illuminated)
    has_pack = bool(live_pack_mates(enemy, ctx))
    if state == EnemyState.PATROL and has_pack:
        return EnemyState.FLOCK
    if state == EnemyState.FLOCK and not has_pack:
        return EnemyState.PATROL
    return state


def pack_update_flock(enemy, dt, ctx):
    mates = live_pack_mates(enemy, ctx)
    force = flocking_force(enemy, mates)
    if force.length_squared() == 0:
        Enemy.update_idle(enemy, dt, ctx)
        return
    enemy.move_towards(enemy.position + force, dt, ctx)


def pack_update_chase(enemy, dt, ctx):
    """Chase, pushed apart from pack-mates so the pack spreads out"""
    Enemy.update_chase(enemy, dt, ctx)
    push = separation(enemy, live_pack_mates(enemy, ctx))
    if push.length_squared() > 0:
        enemy.move_by(push * (CHASE_SEPARATION_WEIGHT * enemy.params.move_speed * dt), ctx)


# ========== AMBUSHER ==========

def ambusher_next_state(enemy, ctx, distance, visible, illuminated):
    """
    Hide and Attack form the ambush cycle and are left by the ambush
    handlers themselves; seeing the player sends the ambusher into hiding
    """
    if enemy.state in (EnemyState.HIDE, EnemyState.ATTACK):
        return enemy.state
    if distance < ATTACK_RANGE:
        return EnemyState.ATTACK
    if visible and distance < enemy.params.detection_range:
        return EnemyState.HIDE
    return Enemy.next_state(enemy, ctx, distance, visible, illuminated)


def ambusher_update_hide(enemy, dt, ctx):
    """Stay still until the player is in ambush range and the cooldown is over"""
    enemy.velocity = Vector3()
    if enemy.distance_to(ctx.player_position) < AMBUSH_RANGE and enemy.ambush_cooldown <= 0:
        enemy.enter_state(EnemyState.ATTACK)
        enemy.ambush_cooldown = AMBUSH_COOLDOWN
        return
    enemy.ambush_cooldown = max(0.0, enemy.ambush_cooldown - dt)


def ambusher_update_attack(enemy, dt, ctx):
    """Fast lunge; drop back into hiding once on top of the player"""
    to_player = flat(ctx.player_position - enemy.position)
    if to_player.length_squared() > 0:
        enemy.facing = math.atan2(to_player.x, to_player.z)
    enemy.move_towards(ctx.player_position, dt, ctx, speed_multiplier=AMBUSH_SPEED_MULTIPLIER)
    if enemy.distance_to(ctx.player_position) < AMBUSH_RETREAT_DISTANCE:
        enemy.enter_state(EnemyState.HIDE)


# ========== TABLE ==========

BEHAVIORS = {
    EnemyVariant.STALKER: VariantBehavior(
        EnemyVariant.STALKER,
        EnemyParams(health=30.0, detection_range=8.0, move_speed=2.0, damage=10.0,
                    light_sensitive=True, use_pathfinding=False, width=0.5, height=3.0),
        COLOR_ENEMY_STALKER,
    ),
    EnemyVariant.PACK_HUNTER: VariantBehavior(
        EnemyVariant.PACK_HUNTER,
        EnemyParams(health=20.0, detection_range=10.0, move_speed=2.5, damage=6.0,
                    light_sensitive=True, use_pathfinding=True, width=0.4, height=2.4),
        COLOR_ENEMY_PACK_HUNTER,
        next_state=pack_next_state,
        handlers={
            EnemyState.FLOCK: pack_update_flock,
            EnemyState.CHASE: pack_update_chase,
        },
    ),
    EnemyVariant.AMBUSHER: VariantBehavior(
        EnemyVariant.AMBUSHER,
        EnemyParams(health=40.0, detection_range=6.0, move_speed=3.0, damage=15.0,
                    light_sensitive=False, use_pathfinding=False, width=0.3, height=1.8),
        COLOR_ENEMY_AMBUSHER,
        initial_state=EnemyState.HIDE,
        next_state=ambusher_next_state,
        handlers={
            EnemyState.HIDE: ambusher_update_hide,
            EnemyState.ATTACK: ambusher_update_attack,
        },
    ),
}


def behavior_for(variant):
    return BEHAVIORS[EnemyVariant(variant)]


def create_enemy(enemy_id, variant, position, health_multiplier=1.0):
    """
    Build an enemy of a variant

    Args:
        enemy_id: Population id
        variant: EnemyVariant or its value ('stalker', 'pack', 'ambusher')
        position: Vector3 spawn point
        health_multiplier: Difficulty scaling of max health
    """
    behavior = behavior_for(variant)
    params = behavior.params
    if health_multiplier != 1.0:
        params = params.scaled(health_multiplier)
    return Enemy(enemy_id, behavior.variant, position, behavior, params)
