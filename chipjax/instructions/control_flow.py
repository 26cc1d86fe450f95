"""CHIP-8 control flow instructions."""

import jax
import jax.lax
import jax.numpy as jnp
from chipjax.state import EmulatorState
from chipjax.decode import DecodedInstruction
from chipjax.signals import Status, StepSignals, emit
from chipjax.stack import push


def execute_jump(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, StepSignals]:
    """1NNN - Jump to address NNN."""
    return state.replace(pc=jnp.astype(instruction.nnn, jnp.uint16)), emit()


def execute_call(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, StepSignals]:
    """2NNN - Call subroutine at NNN.

    A call with 16 return addresses already stacked is refused: pc stays on the
    instruction after the call and STACK_OVERFLOW is reported.
    """
    stack, ok = push(state.stack, state.pc)
    target = jnp.astype(instruction.nnn, jnp.uint16)
    status = jnp.where(ok, int(Status.OK), int(Status.STACK_OVERFLOW))
    return state.replace(stack=stack, pc=jnp.where(ok, target, state.pc)), emit(status)


def make_skip_instruction(condition_fn, valid_fn=None):
    """Factory for skip instructions.

    ``valid_fn`` rejects encodings outside the family (e.g. 5XY1), which are
    reported as unknown and never skip.
    """
    def skip_instruction(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, StepSignals]:
        valid = True if valid_fn is None else valid_fn(instruction)
        condition = jnp.logical_and(valid, condition_fn(state, instruction))
        state = jax.lax.cond(
            condition,
            lambda s: s.replace(pc=s.pc + 2),
            lambda s: s,
            state
        )
        return state, emit(jnp.where(valid, int(Status.OK), int(Status.UNKNOWN_OPCODE)))
    return skip_instruction


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == inst.nn
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != inst.nn
)

execute_skip_if_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == state.V[inst.y],
    lambda inst: inst.n == 0
)

execute_skip_if_not_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != state.V[inst.y],
    lambda inst: inst.n == 0
)

execute_skip_if_key = make_skip_instruction(
    lambda state, inst: state.keypad[state.V[inst.x] & 0xF] ^ (inst.nn == 0xA1),
    lambda inst: (inst.nn == 0x9E) | (inst.nn == 0xA1)
)
execute_skip_if_key.__doc__ = "EX9E/EXA1 - Skip if key VX pressed/not pressed."


def execute_jump_with_offset(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, StepSignals]:
    """BNNN - Jump to address NNN + V0.

    The target is not masked: NNN + V0 may land past 0xFFF, which halts the machine.
    """
    jump_address = jnp.astype(instruction.nnn, jnp.uint16) + jnp.astype(state.V[0], jnp.uint16)
    return state.replace(pc=jump_address), emit()


def execute_jump_with_register_offset(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, StepSignals]:
    """BXNN - Jump to address XNN + VX (``jump_uses_vx`` quirk)."""
    jump_address = jnp.astype(instruction.nnn, jnp.uint16) + jnp.astype(state.V[instruction.x], jnp.uint16)
    return state.replace(pc=jump_address), emit()
