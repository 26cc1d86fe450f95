"""CHIP-8 ALU operations (8xxx).

Every operation returns ``(result, vf)``; the dispatcher writes VX first and
VF last, so VF holds the flag even when X is F.
"""

import jax
import jax.lax
import jax.numpy as jnp
from chipjax.constants import FLAG_REGISTER
from chipjax.state import EmulatorState
from chipjax.decode import DecodedInstruction
from chipjax.signals import Status, StepSignals, emit

UNDEFINED = 9
# Sub-opcode N -> branch index; 8 is SHL (N=E), 9 is the undefined handler
_ALU_TABLE = jnp.array([0, 1, 2, 3, 4, 5, 6, 7, 9, 9, 9, 9, 9, 9, 8, 9], dtype=jnp.int32)


def alu_set(vx, vy, vf):
    """8XY0 - Set: VX = VY."""
    return vy, vf


def alu_or(vx, vy, vf):
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, vf


def alu_and(vx, vy, vf):
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, vf


def alu_xor(vx, vy, vf):
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, vf


def alu_add(vx, vy, vf):
    """8XY4 - Add: VX += VY, VF = carry."""
    result = jnp.astype(vx, jnp.int32) + vy
    carry = jnp.astype(result > 255, jnp.uint8)
    return jnp.astype(result & 0xFF, jnp.uint8), carry


def alu_sub_xy(vx, vy, vf):
    """8XY5 - Subtract: VX -= VY, VF = 1 iff no borrow."""
    no_borrow = jnp.astype(vx >= vy, jnp.uint8)
    return (vx - vy) & 0xFF, no_borrow


def alu_shift_right(vx, vy, vf):
    """8XY6 - Shift right, VF = dropped low bit."""
    return vx >> 1, vx & 1


def alu_sub_yx(vx, vy, vf):
    """8XY7 - Subtract: VX = VY - VX, VF = 1 iff no borrow."""
    no_borrow = jnp.astype(vy >= vx, jnp.uint8)
    return (vy - vx) & 0xFF, no_borrow


def alu_shift_left(vx, vy, vf):
    """8XYE - Shift left, VF = dropped high bit."""
    return (vx << 1) & 0xFF, (vx & 0x80) >> 7


def execute_alu_operation(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, StepSignals]:
    """8XYN - ALU operations dispatcher."""
    vx = state.V[instruction.x]
    vy = state.V[instruction.y]
    vf = state.V[FLAG_REGISTER]

    def _alu_shift_right(vx, vy, vf):
        if state.quirks.shift_uses_vy:
            vx = vy
        return alu_shift_right(vx, vy, vf)

    def _alu_shift_left(vx, vy, vf):
        if state.quirks.shift_uses_vy:
            vx = vy
        return alu_shift_left(vx, vy, vf)

    def _alu_undefined(vx, vy, vf):
        return vx, vf

    branch = _ALU_TABLE[instruction.n]
    result, flag = jax.lax.switch(
        branch,
        [alu_set, alu_or, alu_and, alu_xor, alu_add,
         alu_sub_xy, _alu_shift_right, alu_sub_yx, _alu_shift_left, _alu_undefined],
        vx, vy, vf
    )

    new_V = state.V.at[instruction.x].set(jnp.astype(result, jnp.uint8))
    new_V = new_V.at[FLAG_REGISTER].set(jnp.astype(flag, jnp.uint8))
    status = jnp.where(branch == UNDEFINED, int(Status.UNKNOWN_OPCODE), int(Status.OK))
    return state.replace(V=new_V), emit(status)
